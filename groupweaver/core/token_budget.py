import logging
from collections import deque
from dataclasses import replace
from typing import Callable, Deque, Dict, List, Optional

from .errors import ErrorFactory
from .importance_scorer import FileImportance, get_file_importance
from .models import File, FileGroup, GroupMetadata, GroupingStrategy
from .tokenizer import HeuristicTokenEstimator, TokenEstimator

logger = logging.getLogger(__name__)


class TokenBudgetOptimizer:
    """
    Reshapes file groups so each fits a downstream token budget.

    Groups over the limit are split into importance-ordered chunks with a
    greedy bin-packing pass; groups under the merge threshold then absorb
    later compatible groups while the combined estimate still fits.
    """

    MERGE_THRESHOLD = 0.7  # fraction of the token limit

    def __init__(self, estimator: Optional[TokenEstimator] = None,
                 importance: Callable[[File], FileImportance] = get_file_importance,
                 merge_threshold: float = MERGE_THRESHOLD):
        self.estimator = estimator or HeuristicTokenEstimator()
        self.importance = importance
        self.merge_threshold = merge_threshold

    def optimize(self, groups: List[FileGroup], files: List[File], token_limit: int) -> List[FileGroup]:
        """
        Fit `groups` to `token_limit`.

        Args:
            groups: Groups from a grouping call; they are not mutated
            files: The files the group ids refer to
            token_limit: Maximum estimated tokens per group

        Returns:
            New list of groups with `estimated_tokens` populated
        """
        if isinstance(token_limit, bool) or not isinstance(token_limit, int) or token_limit < 1:
            raise ErrorFactory.invalid_param('token_limit', 'integer >= 1', token_limit)

        file_map = {f.id: f for f in files}
        optimized: List[FileGroup] = []
        split_count = 0

        for group in groups:
            group_files = [file_map[fid] for fid in group.file_ids if fid in file_map]
            estimated = self.estimate_group_tokens(group_files)

            if estimated <= token_limit:
                optimized.append(replace(
                    group,
                    file_ids=list(group.file_ids),
                    relationships=list(group.relationships),
                    estimated_tokens=estimated
                ))
            else:
                chunks = self.split_group(group, group_files, token_limit)
                logger.debug(f"Split group '{group.id}' ({estimated} tokens) into {len(chunks)} chunks")
                split_count += 1
                optimized.extend(chunks)

        result = self.merge_small_groups(optimized, token_limit)

        logger.info(
            f"Token budget {token_limit}: {len(groups)} groups in, {split_count} split, "
            f"{len(result)} groups out"
        )
        return result

    def estimate_group_tokens(self, files: List[File]) -> int:
        return self.estimator.estimate_files(files)

    def split_group(self, group: FileGroup, files: List[File], token_limit: int) -> List[FileGroup]:
        """Greedy bin packing of a group's files, most important first."""
        scores: Dict[str, float] = {f.id: self.importance(f).score for f in files}
        sorted_files = sorted(files, key=lambda f: scores[f.id], reverse=True)

        chunks: List[FileGroup] = []
        current: List[File] = []
        current_tokens = 0

        for file in sorted_files:
            file_tokens = self.estimate_group_tokens([file])

            if current and current_tokens + file_tokens > token_limit:
                chunks.append(self._make_chunk(group, current, current_tokens, len(chunks) + 1))
                current = []
                current_tokens = 0

            # An oversized file still gets a chunk of its own
            current.append(file)
            current_tokens += file_tokens

        if current:
            chunks.append(self._make_chunk(group, current, current_tokens, len(chunks) + 1))

        return chunks

    @staticmethod
    def _make_chunk(group: FileGroup, files: List[File], tokens: int, index: int) -> FileGroup:
        member_ids = [f.id for f in files]
        members = set(member_ids)
        return replace(
            group,
            id=f"{group.id}-chunk-{index}",
            name=f"{group.name} (part {index})",
            file_ids=member_ids,
            relationships=[
                r for r in group.relationships
                if r.source_file_id in members and r.target_file_id in members
            ],
            estimated_tokens=tokens,
            metadata=replace(group.metadata)
        )

    def merge_small_groups(self, groups: List[FileGroup], token_limit: int) -> List[FileGroup]:
        """
        Worklist merge: each small group absorbs later compatible groups, in
        order, until it reaches the threshold or runs out of candidates.
        """
        threshold = token_limit * self.merge_threshold
        pending: Deque[FileGroup] = deque(groups)
        merged: List[FileGroup] = []

        while pending:
            current = pending.popleft()

            if not current.estimated_tokens or current.estimated_tokens >= threshold:
                merged.append(current)
                continue

            passed_over: Deque[FileGroup] = deque()
            while pending and current.estimated_tokens < threshold:
                candidate = pending.popleft()
                combined = current.estimated_tokens + (candidate.estimated_tokens or 0)

                if self._compatible(current, candidate) and combined <= token_limit:
                    current = self._merge_pair(current, candidate, combined, len(merged) + 1)
                else:
                    passed_over.append(candidate)

            passed_over.extend(pending)
            pending = passed_over
            merged.append(current)

        return merged

    @staticmethod
    def _compatible(a: FileGroup, b: FileGroup) -> bool:
        return (
            a.strategy == b.strategy
            or a.strategy == GroupingStrategy.MIXED
            or b.strategy == GroupingStrategy.MIXED
        )

    @staticmethod
    def _merge_pair(a: FileGroup, b: FileGroup, combined_tokens: int, index: int) -> FileGroup:
        return FileGroup(
            id=f"merged-{index}",
            name=f"Merged: {a.name} + {b.name}",
            strategy=GroupingStrategy.MIXED,
            file_ids=a.file_ids + b.file_ids,
            priority=max(a.priority, b.priority),
            project_id=a.project_id,
            relationships=a.relationships + b.relationships,
            estimated_tokens=combined_tokens,
            metadata=GroupMetadata()
        )


def optimize_groups_for_token_limit(groups: List[FileGroup], files: List[File],
                                    token_limit: int) -> List[FileGroup]:
    """Fit `groups` to `token_limit` with the default heuristic estimator."""
    return TokenBudgetOptimizer().optimize(groups, files, token_limit)
