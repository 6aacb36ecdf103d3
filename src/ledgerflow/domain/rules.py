"""Classification rule store."""

import re
from typing import Optional
from ledgerflow.database.base import Database
from ledgerflow.domain import errors
from ledgerflow.domain.clock import Clock, utc_now
from ledgerflow.domain.entities import ClassificationRule, MatchType, RuleSpec
from ledgerflow.domain.matcher import normalize_description
from ledgerflow.logging_config import get_logger

logger = get_logger("domain.rules")

DEFAULT_PRIORITY = 50

# (rule name, match type, match value, account code, priority)
STANDARD_RULES = [
    ("Salaries", MatchType.CONTAINS, "SALARY", "8100", 60),
    ("Wages", MatchType.CONTAINS, "WAGES", "8100", 60),
    ("Rent", MatchType.REGEX, r"(?i)\bRENT(AL)?\b", "8200", 55),
    ("Eskom", MatchType.CONTAINS, "ESKOM", "8300", 60),
    ("Electricity", MatchType.CONTAINS, "ELECTRICITY", "8300", 55),
    ("Municipal Account", MatchType.CONTAINS, "MUNICIPAL", "8300", 50),
    ("Telkom", MatchType.CONTAINS, "TELKOM", "8400", 60),
    ("Vodacom", MatchType.CONTAINS, "VODACOM", "8400", 60),
    ("MTN", MatchType.STARTS_WITH, "MTN", "8400", 60),
    ("Engen", MatchType.CONTAINS, "ENGEN", "8600", 55),
    ("Shell", MatchType.CONTAINS, "SHELL", "8600", 55),
    ("Sasol", MatchType.CONTAINS, "SASOL", "8600", 55),
    ("Insurance", MatchType.CONTAINS, "INSURANCE", "8800", 50),
    ("Bank Service Fee", MatchType.CONTAINS, "SERVICE FEE", "9600", 70),
    ("Bank Charges", MatchType.CONTAINS, "BANK CHARGES", "9600", 70),
    ("Monthly Account Fee", MatchType.CONTAINS, "ACCOUNT FEE", "9600", 70),
    ("Debit Interest", MatchType.CONTAINS, "DEBIT INTEREST", "9500", 65),
    ("Credit Interest", MatchType.CONTAINS, "CREDIT INTEREST", "5000", 65),
    ("SARS", MatchType.CONTAINS, "SARS", "9800", 65),
]

_REFERENCE_TOKEN = re.compile(r"\d")


def derive_match_value(description: str) -> str:
    """Derive a reusable match value from a statement description.

    Tokens containing digits (dates, references, card numbers) are dropped.
    Falls back to the full normalized description if nothing remains.
    """
    normalized = normalize_description(description)
    words = [word for word in normalized.split() if not _REFERENCE_TOKEN.search(word)]
    return " ".join(words) if words else normalized


class RuleService:
    """Service for managing classification rules.

    Rules are never edited in place: an edit deactivates the old rule and
    creates a new one, so historical classifications stay explainable.
    """

    def __init__(self, db: Database, clock: Clock = utc_now):
        """Initialize rule service.

        Args:
            db: Database instance
            clock: Source of timestamps for rule state changes
        """
        self.db = db
        self.clock = clock

    def list_active_rules(self, company_id: int) -> list[ClassificationRule]:
        """List active rules ordered by priority descending, then ID ascending."""
        return self.db.list_rules(company_id, active_only=True)

    def list_rules(self, company_id: int, include_inactive: bool = False) -> list[ClassificationRule]:
        """List rules in evaluation order, optionally including inactive ones."""
        return self.db.list_rules(company_id, active_only=not include_inactive)

    def get_rule(self, rule_id: int) -> Optional[ClassificationRule]:
        return self.db.get_rule(rule_id)

    def require_rule(self, rule_id: int) -> ClassificationRule:
        """Get rule by ID or raise NotFoundError."""
        rule = self.db.get_rule(rule_id)
        if rule is None:
            raise errors.NotFoundError(errors.rule_not_found(rule_id))
        return rule

    def create_rule(
        self,
        company_id: int,
        rule_name: str,
        match_type: MatchType | str,
        match_value: str,
        account_code: str,
        priority: int = DEFAULT_PRIORITY,
        description: Optional[str] = None,
    ) -> ClassificationRule:
        """Create a classification rule.

        Args:
            company_id: Company ID
            rule_name: Display name
            match_type: One of CONTAINS, STARTS_WITH, ENDS_WITH, EQUALS, REGEX
            match_value: Pattern text; REGEX values must compile
            account_code: Active account the rule classifies into
            priority: Higher priorities are evaluated first
            description: Optional free-text description

        Returns:
            The created rule

        Raises:
            ValidationError: If a field is blank, the match type is unknown,
                the regex is invalid, or the account is not active
        """
        rule_name = (rule_name or "").strip()
        raw_match_value = match_value or ""
        account_code = (account_code or "").strip()
        if not rule_name:
            raise errors.ValidationError("Rule name is required")
        if not raw_match_value.strip():
            raise errors.ValidationError("Rule match value is required")
        if not account_code:
            raise errors.ValidationError("Rule account code is required")

        try:
            match_type = MatchType(match_type.upper() if isinstance(match_type, str) else match_type)
        except ValueError as e:
            valid = ", ".join(m.value for m in MatchType)
            raise errors.ValidationError(f"Unknown match type '{match_type}'. Valid types: {valid}") from e

        # Regex patterns are stored exactly as given
        match_value = raw_match_value if match_type == MatchType.REGEX else raw_match_value.strip()

        if match_type == MatchType.REGEX:
            try:
                re.compile(match_value)
            except re.error as e:
                raise errors.ValidationError(f"Invalid regular expression '{match_value}': {e}") from e

        if self.db.get_company(company_id) is None:
            raise errors.NotFoundError(errors.company_not_found(company_id))

        account = self.db.get_account(company_id, account_code)
        if account is None:
            raise errors.ValidationError(errors.unknown_account(company_id, account_code))
        if not account.active:
            raise errors.ValidationError(errors.unknown_account(company_id, account_code, "is inactive"))

        rule_id = self.db.create_rule(
            company_id=company_id,
            rule_name=rule_name,
            match_type=match_type.value,
            match_value=match_value,
            account_code=account_code,
            priority=int(priority),
            description=description,
        )
        logger.info(
            "Created rule %s '%s' (%s %r -> %s, priority %s)",
            rule_id,
            rule_name,
            match_type.value,
            match_value,
            account_code,
            priority,
        )
        return self.require_rule(rule_id)

    def create_from_spec(self, company_id: int, spec: RuleSpec) -> ClassificationRule:
        """Create a rule from a RuleSpec."""
        return self.create_rule(
            company_id=company_id,
            rule_name=spec.rule_name,
            match_type=spec.match_type,
            match_value=spec.match_value,
            account_code=spec.account_code,
            priority=spec.priority,
            description=spec.description,
        )

    def deactivate_rule(self, rule_id: int) -> None:
        """Deactivate a rule. Deactivating an inactive rule is a no-op."""
        rule = self.require_rule(rule_id)
        if not rule.active:
            return
        self.db.set_rule_active(rule_id, False, self.clock())
        logger.info("Deactivated rule %s '%s'", rule.id, rule.rule_name)

    def replace_rule(self, rule_id: int, **changes) -> ClassificationRule:
        """Edit a rule by deactivating it and creating its successor.

        Args:
            rule_id: Rule to replace
            **changes: Any of rule_name, match_type, match_value, account_code,
                priority, description

        Returns:
            The new rule
        """
        allowed = {"rule_name", "match_type", "match_value", "account_code", "priority", "description"}
        unknown = set(changes) - allowed
        if unknown:
            raise errors.ValidationError(f"Unknown rule field(s): {', '.join(sorted(unknown))}")

        old = self.require_rule(rule_id)
        if not old.active:
            raise errors.ValidationError(f"Rule {rule_id} is inactive and cannot be replaced")

        fields = {
            "rule_name": old.rule_name,
            "match_type": old.match_type,
            "match_value": old.match_value,
            "account_code": old.account_code,
            "priority": old.priority,
            "description": old.description,
        }
        fields.update(changes)

        # Validate the successor before retiring the old rule
        new_rule = self.create_rule(company_id=old.company_id, **fields)
        self.deactivate_rule(old.id)
        logger.info("Replaced rule %s with %s", old.id, new_rule.id)
        return new_rule

    def delete_rule(self, rule_id: int) -> None:
        """Physically delete a rule that never classified a transaction.

        Raises:
            DependencyError: If any transaction was classified by the rule
        """
        self.require_rule(rule_id)
        usage = self.db.count_rule_usage(rule_id)
        if usage > 0:
            raise errors.DependencyError(errors.rule_in_use(rule_id, usage))
        self.db.delete_rule(rule_id)
        logger.info("Deleted rule %s", rule_id)

    def generate_rule_from_transaction(
        self,
        transaction_id: int,
        account_code: str,
        match_type: MatchType | str = MatchType.CONTAINS,
        priority: int = DEFAULT_PRIORITY,
        rule_name: Optional[str] = None,
    ) -> ClassificationRule:
        """Create a rule whose pattern is derived from a transaction description."""
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise errors.NotFoundError(errors.transaction_not_found(transaction_id))

        match_type = MatchType(match_type.upper() if isinstance(match_type, str) else match_type)
        if match_type == MatchType.EQUALS:
            match_value = normalize_description(txn.description)
        elif match_type == MatchType.REGEX:
            match_value = re.escape(txn.description.strip())
        else:
            match_value = derive_match_value(txn.description)

        return self.create_rule(
            company_id=txn.company_id,
            rule_name=rule_name or f"Auto: {match_value[:60]}",
            match_type=match_type,
            match_value=match_value,
            account_code=account_code,
            priority=priority,
            description=f"Generated from transaction {transaction_id}",
        )

    def install_standard_rules(self, company_id: int) -> int:
        """Seed the standard rule set for accounts present in the chart.

        Rules whose account is missing or inactive, or whose name already
        exists, are skipped.

        Returns:
            Number of rules created
        """
        if self.db.get_company(company_id) is None:
            raise errors.NotFoundError(errors.company_not_found(company_id))

        existing_names = {rule.rule_name for rule in self.db.list_rules(company_id, active_only=False)}
        created = 0
        for name, match_type, match_value, account_code, priority in STANDARD_RULES:
            if name in existing_names:
                continue
            account = self.db.get_account(company_id, account_code)
            if account is None or not account.active:
                logger.debug("Skipping standard rule '%s': account %s unavailable", name, account_code)
                continue
            self.create_rule(
                company_id=company_id,
                rule_name=name,
                match_type=match_type,
                match_value=match_value,
                account_code=account_code,
                priority=priority,
            )
            created += 1
        logger.info("Installed %d standard rules for company %s", created, company_id)
        return created
