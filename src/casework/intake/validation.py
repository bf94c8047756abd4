"""Validation engine for intake wizard steps.

Validation never raises: every step returns a sparse error tree that
mirrors the :class:`IntakeRecord` shape and holds a :class:`FieldError`
at each invalid field. An empty tree means the step is valid.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, Iterator, Sequence, Union

from casework.core.config import IntakeConfig
from casework.core.types import WizardStep
from casework.intake.models import ErrorTree, FieldError, IntakeRecord
from casework.intake.validators.common import VALIDATORS, parse_date

# A rule is a registered validator name, optionally with parameters either
# inline ("max_length:limit=20") or as a (name, params) pair.
Rule = Union[str, tuple[str, dict[str, Any]]]
StepRule = Callable[[IntakeRecord], ErrorTree]


def _parse_rule(rule: Rule) -> tuple[str, dict[str, Any]]:
    if isinstance(rule, tuple):
        return rule
    name, _, raw_params = rule.partition(":")
    params: dict[str, Any] = {}
    if raw_params:
        for pair in raw_params.split(","):
            k, _, v = pair.partition("=")
            params[k.strip()] = v.strip()
    return name, params


def _put(tree: ErrorTree, path: Sequence[str], error: FieldError) -> None:
    node = tree
    for key in path[:-1]:
        node = node.setdefault(key, {})
    node[path[-1]] = error


def merge_trees(target: ErrorTree, source: ErrorTree) -> ErrorTree:
    """Merge *source* into *target* in place; existing leaves win."""
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            merge_trees(target[key], value)
        else:
            target.setdefault(key, value)
    return target


def iter_errors(tree: Any, prefix: str = "") -> Iterator[tuple[str, FieldError]]:
    """Yield ``(dotted_path, error)`` for every leaf, e.g. ``members.1.cpf``."""
    if isinstance(tree, FieldError):
        yield prefix, tree
    elif isinstance(tree, dict):
        for key, value in tree.items():
            yield from iter_errors(value, f"{prefix}.{key}" if prefix else str(key))
    elif isinstance(tree, list):
        for i, value in enumerate(tree):
            if value is not None:
                yield from iter_errors(value, f"{prefix}.{i}" if prefix else str(i))


def flatten(tree: ErrorTree) -> dict[str, FieldError]:
    return dict(iter_errors(tree))


def dump_tree(tree: Any) -> Any:
    """Plain dict/list form of an error tree, suitable for JSON."""
    if isinstance(tree, FieldError):
        return tree.model_dump(mode="json")
    if isinstance(tree, dict):
        return {key: dump_tree(value) for key, value in tree.items()}
    if isinstance(tree, list):
        return [dump_tree(value) for value in tree]
    return tree


class ValidationEngine:
    """Registry-based validation engine.

    Field validators come from :data:`VALIDATORS`; each wizard step has a
    built-in rule set plus any extra step rules registered by callers.
    """

    def __init__(
        self,
        config: IntakeConfig | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._config = config or IntakeConfig()
        self._clock = clock
        self._validators: dict[str, Callable[..., FieldError | None]] = dict(VALIDATORS)
        self._step_rules: dict[WizardStep, list[StepRule]] = {step: [] for step in WizardStep}

    def register(self, name: str, fn: Callable[..., FieldError | None]) -> None:
        self._validators[name] = fn

    def register_step_rule(self, step: WizardStep, fn: StepRule) -> None:
        """Add a record-level rule whose error tree is merged into *step*'s."""
        self._step_rules[WizardStep(step)].append(fn)

    def check(self, value: Any, rules: Sequence[Rule], **params: Any) -> FieldError | None:
        """Run *rules* in order and return the first failure."""
        for rule in rules:
            name, rule_params = _parse_rule(rule)
            fn = self._validators.get(name)
            if fn is None:
                continue
            err = fn(value, **{**params, **rule_params})
            if err is not None:
                return err
        return None

    # -- steps --

    def validate_step(self, record: IntakeRecord, step: int | WizardStep) -> ErrorTree:
        step = WizardStep(step)
        builtin: dict[WizardStep, StepRule] = {
            WizardStep.IDENTIFICATION: self._validate_identification,
            WizardStep.FAMILY: self._validate_family,
            WizardStep.HEALTH: self._validate_health,
            WizardStep.HOUSING: self._validate_housing,
            WizardStep.INCOME: self._validate_income,
            WizardStep.SOCIAL: self._validate_social,
        }
        tree = builtin[step](record)
        for rule in self._step_rules[step]:
            merge_trees(tree, rule(record))
        return tree

    def validate_record(self, record: IntakeRecord) -> dict[WizardStep, ErrorTree]:
        """Validate every step; steps without errors are omitted."""
        results: dict[WizardStep, ErrorTree] = {}
        for step in WizardStep:
            tree = self.validate_step(record, step)
            if tree:
                results[step] = tree
        return results

    def first_invalid_step(self, record: IntakeRecord) -> tuple[WizardStep | None, ErrorTree]:
        for step in WizardStep:
            tree = self.validate_step(record, step)
            if tree:
                return step, tree
        return None, {}

    def errors_by_member(self, record: IntakeRecord, tree: ErrorTree) -> dict[str, ErrorTree]:
        """Re-key the positional ``members`` errors by stable member id."""
        result: dict[str, ErrorTree] = {}
        for member, errors in zip(record.members, tree.get("members") or []):
            if errors:
                result[member.member_id] = errors
        return result

    # -- rule sets --

    def _apply(self, tree: ErrorTree, path: str, value: Any, rules: Sequence[Rule], **params: Any) -> None:
        err = self.check(value, rules, **params)
        if err is not None:
            _put(tree, path.split("."), err)

    def _validate_identification(self, record: IntakeRecord) -> ErrorTree:
        tree: ErrorTree = {}
        today = self._clock()
        reference = parse_date(record.attendance_date) or today
        responsible = record.responsible
        address = record.address

        self._apply(
            tree, "case_worker_id", record.case_worker_id,
            [("selected", {"message": "Select the responsible case worker."})],
        )
        self._apply(
            tree, "responsible.full_name", responsible.full_name,
            [
                ("required", {"message": "Full name is required."}),
                ("name", {"require_surname": True}),
            ],
        )
        self._apply(
            tree, "responsible.birth_date", responsible.birth_date,
            [
                ("required", {"message": "Birth date is required."}),
                ("past_date", {"today": today}),
                (
                    "min_age",
                    {"years": self._config.minimum_responsible_age, "reference": reference},
                ),
            ],
        )
        self._apply(
            tree, "responsible.cpf", responsible.cpf,
            [("required", {"message": "CPF is required."}), "cpf"],
        )
        self._apply(
            tree, "responsible.id_document", responsible.id_document,
            [
                ("required", {"message": "Identity document is required."}),
                ("max_length", {"limit": self._config.max_document_length}),
            ],
        )
        self._apply(tree, "responsible.nis", responsible.nis, ["nis"])
        self._apply(tree, "responsible.email", responsible.email, ["email"])
        self._apply(
            tree, "responsible.voter_registration", responsible.voter_registration,
            ["voter_registration"],
        )
        self._apply(tree, "responsible.monthly_income", responsible.monthly_income, ["non_negative"])
        self._apply(
            tree, "address.street", address.street,
            [("required", {"message": "Street is required."}), "meaningful_text"],
        )
        self._apply(
            tree, "address.neighborhood", address.neighborhood,
            [("required", {"message": "Neighborhood is required."}), "meaningful_text"],
        )
        return tree

    def _validate_family(self, record: IntakeRecord) -> ErrorTree:
        today = self._clock()
        member_errors: list[ErrorTree | None] = []
        for member in record.members:
            errors: ErrorTree = {}
            self._apply(
                errors, "full_name", member.full_name,
                [("required", {"message": "Name is required."})],
            )
            self._apply(
                errors, "birth_date", member.birth_date,
                [("required", {"message": "Birth date is required."}), ("past_date", {"today": today})],
            )
            self._apply(
                errors, "cpf", member.cpf,
                [("required", {"message": "CPF is required."}), "cpf"],
            )
            self._apply(errors, "monthly_income", member.monthly_income, ["non_negative"])
            member_errors.append(errors or None)

        if any(e is not None for e in member_errors):
            return {"members": member_errors}
        return {}

    def _validate_health(self, record: IntakeRecord) -> ErrorTree:
        # No blocking rules; the "which" texts are optional even when flagged.
        return {}

    def _validate_housing(self, record: IntakeRecord) -> ErrorTree:
        tree: ErrorTree = {}
        self._apply(tree, "housing.rooms", record.housing.rooms, ["non_negative"])
        self._apply(tree, "housing.bedrooms", record.housing.bedrooms, ["non_negative"])
        return tree

    def _validate_income(self, record: IntakeRecord) -> ErrorTree:
        tree: ErrorTree = {}
        self._apply(tree, "income.total_income", record.income.total_income, ["non_negative"])

        for key, entries in (
            ("program_enrollments", record.program_enrollments),
            ("expenses", record.expenses),
        ):
            entry_errors: list[ErrorTree | None] = []
            for entry in entries:
                errors: ErrorTree = {}
                self._apply(errors, "amount", entry.amount, ["non_negative"])
                entry_errors.append(errors or None)
            if any(e is not None for e in entry_errors):
                tree[key] = entry_errors
        return tree

    def _validate_social(self, record: IntakeRecord) -> ErrorTree:
        return {}
