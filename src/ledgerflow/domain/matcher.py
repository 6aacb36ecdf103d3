"""Rule matching for transaction descriptions.

Matching is a pure function of a description and a rule list. It never
chooses a winner; callers get every matching rule in the order given.
"""

import re
from typing import Iterable
from ledgerflow.domain.entities import ClassificationRule, MatchType
from ledgerflow.logging_config import get_logger

logger = get_logger("domain.matcher")


def normalize_description(description: str) -> str:
    """Trim and upper-case a description for plain-text matching."""
    return (description or "").strip().upper()


def rule_matches(rule: ClassificationRule, description: str) -> bool:
    """Check whether a single rule matches a description.

    Raises:
        re.error: If a REGEX rule's pattern does not compile
    """
    match_type = MatchType(rule.match_type)
    if match_type == MatchType.REGEX:
        return re.search(rule.match_value, description or "") is not None

    text = normalize_description(description)
    value = normalize_description(rule.match_value)
    if not value:
        return False
    if match_type == MatchType.CONTAINS:
        return value in text
    if match_type == MatchType.STARTS_WITH:
        return text.startswith(value)
    if match_type == MatchType.ENDS_WITH:
        return text.endswith(value)
    return text == value


def match_rules(description: str, rules: Iterable[ClassificationRule]) -> list[ClassificationRule]:
    """Return the rules matching a description, in input order.

    A REGEX rule whose pattern is invalid is skipped and logged.
    """
    matches = []
    for rule in rules:
        try:
            matched = rule_matches(rule, description)
        except re.error as e:
            logger.warning(
                "Skipping rule %s (%s): invalid regular expression %r: %s",
                rule.id,
                rule.rule_name,
                rule.match_value,
                e,
            )
            continue
        if matched:
            matches.append(rule)
    logger.debug("Description %r matched %d rule(s)", description, len(matches))
    return matches
