"""
Duplicate analysis across the fallback tiers.

backend analyze -> classifier -> heuristic. The classifier and heuristic
tiers form their own chain returning duplicate ids, which the coordinator
projects onto the original source list.
"""
import logging
from typing import List, Optional, Set

from cherrypick.core.config import settings
from cherrypick.models import AnalysisResult, Commit, CommitStatus, Repository
from cherrypick.services.backend_client import BackendClient
from cherrypick.services.classifier import CommitClassifier
from cherrypick.services.fallback import FallbackChain, FallbackTier
from cherrypick.services.heuristics import HeuristicPolicy, find_duplicates, mark_duplicates

logger = logging.getLogger(__name__)


class ClassifierMatcher(FallbackTier[Set[str]]):
    name = "classifier"

    def __init__(self, classifier: CommitClassifier):
        self.classifier = classifier

    async def attempt(self, source: Repository, target: Repository) -> Set[str]:
        return await self.classifier.classify(source, target)


class HeuristicMatcher(FallbackTier[Set[str]]):
    name = "heuristic"

    def __init__(self, policy: HeuristicPolicy = HeuristicPolicy()):
        self.policy = policy

    async def attempt(self, source: Repository, target: Repository) -> Set[str]:
        return find_duplicates(source, target, self.policy)


def build_matcher_chain(
    classifier: Optional[CommitClassifier] = None,
    policy: Optional[HeuristicPolicy] = None,
) -> FallbackChain[Set[str]]:
    """Classifier first when one is configured, heuristic always last."""
    tiers: List[FallbackTier[Set[str]]] = []
    if classifier is not None:
        tiers.append(ClassifierMatcher(classifier))
    else:
        logger.info("No classifier configured. Using local heuristic analysis.")
    tiers.append(HeuristicMatcher(policy or HeuristicPolicy(settings.heuristic_metadata_match)))
    return FallbackChain("matching", tiers)


class BackendAnalysis(FallbackTier[List[Commit]]):
    name = "backend"

    def __init__(self, client: BackendClient):
        self.client = client

    async def attempt(self, source: Repository, target: Repository) -> List[Commit]:
        return await self.client.analyze(source, target)


class LocalAnalysis(FallbackTier[List[Commit]]):
    """Runs the matcher chain and projects its ids onto the source list"""

    name = "local"

    def __init__(self, matchers: FallbackChain[Set[str]]):
        self.matchers = matchers
        self.last_matcher: Optional[str] = None

    async def attempt(self, source: Repository, target: Repository) -> List[Commit]:
        self.last_matcher, duplicate_ids = await self.matchers.run(source, target)
        return mark_duplicates(source.commits, duplicate_ids)


class AnalysisCoordinator:
    def __init__(
        self,
        backend: Optional[BackendClient] = None,
        classifier: Optional[CommitClassifier] = None,
        policy: Optional[HeuristicPolicy] = None,
    ):
        self.local = LocalAnalysis(build_matcher_chain(classifier, policy))
        tiers: List[FallbackTier[List[Commit]]] = []
        if backend is not None:
            tiers.append(BackendAnalysis(backend))
        tiers.append(self.local)
        self.chain = FallbackChain("analysis", tiers)

    @classmethod
    def from_settings(cls, backend: Optional[BackendClient] = None) -> "AnalysisCoordinator":
        classifier = CommitClassifier() if settings.classifier_enabled else None
        return cls(backend=backend, classifier=classifier)

    async def analyze(self, source: Repository, target: Repository) -> AnalysisResult:
        """Full replacement commit list for the source repository."""
        tier, commits = await self.chain.run(source, target)
        if tier == self.local.name:
            tier = self.local.last_matcher or tier
        picked = sum(1 for c in commits if c.effective_status is CommitStatus.PICKED)
        logger.info(f"Analysis via {tier}: {picked} of {len(commits)} commits already in {target.name}")
        return AnalysisResult(commits=commits, tier=tier)
