"""
Remote duplicate classifier backed by Claude.

Sends minimized commit summaries of both repositories in one request and
reads back a JSON object of the form ``{"duplicateIds": [...]}``.
"""
import asyncio
import json
import logging
import re
from typing import Any, AsyncIterator, Callable, Optional, Set

from claude_code_sdk import query, ClaudeCodeOptions

from cherrypick.core.config import settings
from cherrypick.models import Repository
from cherrypick.services.fallback import TierFailure

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You compare git histories. Given commits of a SOURCE repository and a TARGET "
    "repository, decide which SOURCE commits have effectively already been applied "
    "to TARGET, for example through a cherry-pick with a reworded message. "
    'Answer with JSON only, shaped as {"duplicateIds": ["<source id>", ...]}.'
)

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)

QueryFn = Callable[..., AsyncIterator[Any]]


class ClassifierError(TierFailure):
    """The classifier could not be consulted"""


def build_prompt(source: Repository, target: Repository) -> str:
    source_summary = [
        {"id": c.id, "hash": c.hash, "message": c.message, "author": c.author}
        for c in source.commits
    ]
    target_summary = [{"hash": c.hash, "message": c.message} for c in target.commits]
    return (
        "Identify which commits in the SOURCE list have effectively already been applied to the TARGET list.\n"
        f"SOURCE: {json.dumps(source_summary)}\n"
        f"TARGET: {json.dumps(target_summary)}\n"
        "Return JSON with a 'duplicateIds' array."
    )


def parse_duplicate_ids(text: Optional[str]) -> Set[str]:
    """Extract duplicate ids from a classifier answer.

    Anything unusable yields an empty set.
    """
    if not text:
        return set()
    match = _JSON_OBJECT.search(text)
    if not match:
        logger.warning("Classifier answer contained no JSON object")
        return set()
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError:
        logger.warning("Classifier answer was not valid JSON")
        return set()
    ids = data.get("duplicateIds") if isinstance(data, dict) else None
    if not isinstance(ids, list):
        logger.warning("Classifier answer had no duplicateIds list")
        return set()
    return {item for item in ids if isinstance(item, str)}


class CommitClassifier:
    """Single-shot classifier call with a hard timeout"""

    def __init__(
        self,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        query_fn: Optional[QueryFn] = None,
    ):
        self.model = model or settings.classifier_model
        self.timeout = timeout if timeout is not None else settings.classifier_timeout
        self.query_fn = query_fn or query

    def _options(self) -> ClaudeCodeOptions:
        return ClaudeCodeOptions(
            system_prompt=SYSTEM_PROMPT,
            model=self.model,
            max_turns=1,
            allowed_tools=[],
        )

    async def _collect_answer(self, prompt: str) -> Optional[str]:
        answer: Optional[str] = None
        async for message in self.query_fn(prompt=prompt, options=self._options()):
            result = getattr(message, "result", None)
            if getattr(message, "is_error", False):
                raise ClassifierError(f"Classifier reported an error: {result or 'unknown'}")
            if isinstance(result, str):
                answer = result
        return answer

    async def classify(self, source: Repository, target: Repository) -> Set[str]:
        """Return source ids the classifier judges already present in target.

        Raises ClassifierError on timeout or any failure to reach the model.
        """
        prompt = build_prompt(source, target)
        try:
            answer = await asyncio.wait_for(self._collect_answer(prompt), timeout=self.timeout)
        except ClassifierError:
            raise
        except asyncio.TimeoutError:
            raise ClassifierError(f"Classifier timed out after {self.timeout}s")
        except Exception as e:
            raise ClassifierError(f"Classifier unreachable: {e}")

        duplicates = parse_duplicate_ids(answer)
        logger.info(f"Classifier flagged {len(duplicates)} of {len(source.commits)} commits")
        return duplicates
