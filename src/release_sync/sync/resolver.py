"""Work item identifier resolution from branch names and titles.

Extraction rules are configuration data: an ordered list of regular
expressions with a capture group holding the identifier. Rules are evaluated
in configured order and the first structurally valid match wins.
"""

import logging
import re
from dataclasses import dataclass

from ..models import ParseFailurePolicy
from .exceptions import ResolutionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractionRule:
    """One configured identifier extraction pattern."""

    name: str
    pattern: str
    case_sensitive: bool = False
    capture_group_index: int = 1

    def __str__(self) -> str:
        """Return human-readable string representation."""
        return f"ExtractionRule({self.name}: {self.pattern})"


class IdentifierResolver:
    """Resolves work item identifiers using ordered extraction rules.

    A rule matches only when its pattern matches, the capture group exists
    and the captured text parses as an integer >= 0. Anything else, including
    a pattern that fails to compile, is a non-match for that rule and the
    next rule is tried.
    """

    def __init__(
        self,
        rules: list[ExtractionRule],
        on_failure: ParseFailurePolicy = ParseFailurePolicy.WARN_AND_CONTINUE,
    ):
        """Initialize the resolver.

        Args:
            rules: Extraction rules in evaluation order
            on_failure: Behaviour when no rule matches
        """
        self.rules = list(rules)
        self.on_failure = on_failure
        self._compiled: dict[int, re.Pattern[str] | None] = {}

        if not self.rules:
            logger.warning("No work item extraction rules configured")

    def resolve(self, text: str) -> int | None:
        """Resolve an identifier from a single text fragment.

        Args:
            text: Branch name or title

        Returns:
            The identifier, or None when unresolved under ``warn-and-continue``

        Raises:
            ResolutionError: If unresolved and the policy is ``fail``
        """
        return self.resolve_first(text)

    def resolve_first(
        self, *texts: str | None, unresolved_log_level: int = logging.WARNING
    ) -> int | None:
        """Resolve from the first text fragment that yields an identifier.

        The failure policy is applied once, after every fragment was tried.

        Args:
            texts: Candidate fragments in priority order (blank ones skipped)
            unresolved_log_level: Level of the "unable to resolve" message
                under ``warn-and-continue``

        Returns:
            The identifier, or None when unresolved under ``warn-and-continue``

        Raises:
            ResolutionError: If unresolved and the policy is ``fail``
        """
        candidates = [text for text in texts if text and text.strip()]

        for text in candidates:
            identifier = self.match(text)
            if identifier is not None:
                return identifier

        description = " | ".join(candidates)
        if self.on_failure == ParseFailurePolicy.FAIL:
            raise ResolutionError(description, [rule.name for rule in self.rules])

        logger.log(
            unresolved_log_level,
            f"Unable to resolve work item identifier from: {description!r}",
        )
        return None

    def match(self, text: str) -> int | None:
        """Evaluate the rules against ``text`` without applying the policy."""
        for index, rule in enumerate(self.rules):
            identifier = self._match_rule(index, rule, text)
            if identifier is not None:
                logger.info(
                    f"Resolved work item ID{identifier} from {text!r} "
                    f"using rule {rule.name!r}"
                )
                return identifier
        return None

    def _match_rule(self, index: int, rule: ExtractionRule, text: str) -> int | None:
        pattern = self._compile(index, rule)
        if pattern is None:
            return None

        match = pattern.search(text)
        if match is None:
            return None

        try:
            value = match.group(rule.capture_group_index)
        except IndexError:
            logger.debug(
                f"Rule {rule.name!r} has no capture group {rule.capture_group_index}"
            )
            return None

        # \d also matches non-ASCII digits
        if value is None or not value.isascii():
            return None

        try:
            identifier = int(value)
        except ValueError:
            return None

        if identifier < 0:
            return None

        return identifier

    def _compile(self, index: int, rule: ExtractionRule) -> re.Pattern[str] | None:
        if index not in self._compiled:
            flags = 0 if rule.case_sensitive else re.IGNORECASE
            try:
                self._compiled[index] = re.compile(rule.pattern, flags)
            except re.error as e:
                logger.error(
                    f"Invalid extraction pattern in rule {rule.name!r} "
                    f"({rule.pattern!r}): {e}"
                )
                self._compiled[index] = None
        return self._compiled[index]
