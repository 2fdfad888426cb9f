"""
Availability Rule Resolver

Picks the single effective availability rule for a civil date:
- Date override (one_time / day_off) for that exact date
- Otherwise the recurring rule for the date's weekday
- Otherwise nothing (the owner is unavailable)
"""

from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .errors import DuplicateRuleError
from .models import OVERRIDE_RULE_TYPES, AvailabilityRule, RecurringRule
from .timezones import parse_date


def day_of_week(target_date: date) -> int:
	"""Weekday con domingo=0 .. sábado=6 (date.weekday() usa lunes=0)."""
	return (target_date.weekday() + 1) % 7


def _owned(rules: Iterable[AvailabilityRule], owner: Optional[str]) -> List[AvailabilityRule]:
	if owner is None:
		return list(rules)
	return [rule for rule in rules if rule.owner == owner]


def get_override_for_date(
	target_date: Union[date, str],
	rules: Iterable[AvailabilityRule],
	owner: Optional[str] = None
) -> Optional[AvailabilityRule]:
	"""Override (one_time o day_off) cuya date_override es target_date, o None."""
	target_date = parse_date(target_date)
	for rule in _owned(rules, owner):
		if isinstance(rule, OVERRIDE_RULE_TYPES) and rule.date_override == target_date:
			return rule
	return None


def get_recurring_rule_for_day(
	weekday: int,
	rules: Iterable[AvailabilityRule],
	owner: Optional[str] = None
) -> Optional[RecurringRule]:
	"""Regla recurrente para un weekday (0=domingo), o None."""
	for rule in _owned(rules, owner):
		if isinstance(rule, RecurringRule) and rule.day_of_week == weekday:
			return rule
	return None


def resolve_effective_rule(
	target_date: Union[date, str],
	rules: Iterable[AvailabilityRule],
	owner: Optional[str] = None
) -> Optional[AvailabilityRule]:
	"""
	Obtiene la regla efectiva para una fecha civil del owner.

	Args:
		target_date: fecha (date o "YYYY-MM-DD"), sin componente horario
		rules: todas las reglas de disponibilidad
		owner: si se indica, solo se consideran las reglas de ese owner

	Returns:
		La regla que aplica, o None (sin regla = no disponible)

	Algoritmo:
		1. Buscar override con date_override == fecha
		2. Si no hay, buscar recurring con day_of_week de la fecha
		3. Si tampoco, None
	"""
	target_date = parse_date(target_date)
	rules = _owned(rules, owner)

	override = get_override_for_date(target_date, rules)
	if override is not None:
		return override

	return get_recurring_rule_for_day(day_of_week(target_date), rules)


def get_overrides(
	rules: Iterable[AvailabilityRule],
	owner: Optional[str] = None
) -> List[AvailabilityRule]:
	"""Overrides ordenados cronológicamente por date_override."""
	overrides = [rule for rule in _owned(rules, owner) if isinstance(rule, OVERRIDE_RULE_TYPES)]
	overrides.sort(key=lambda rule: rule.date_override)
	return overrides


def is_day_available(
	target_date: Union[date, str],
	rules: Iterable[AvailabilityRule],
	today: date,
	owner: Optional[str] = None
) -> bool:
	"""
	True si la fecha no está en el pasado y su regla efectiva está disponible.

	Args:
		today: fecha civil actual del owner (inyectada, nunca leída del reloj)
	"""
	target_date = parse_date(target_date)
	if target_date < today:
		return False

	rule = resolve_effective_rule(target_date, rules, owner)
	return bool(rule and rule.is_available)


def validate_rule_set(rules: Iterable[AvailabilityRule]) -> None:
	"""
	Verifica la integridad del conjunto de reglas (por owner).

	- A lo sumo un recurring por day_of_week
	- A lo sumo un override por date_override

	Raises:
		DuplicateRuleError: con las dos reglas en conflicto
	"""
	seen: Dict[Tuple[str, str, object], AvailabilityRule] = {}

	for rule in rules:
		if isinstance(rule, RecurringRule):
			key = (rule.owner, "weekday", rule.day_of_week)
		else:
			key = (rule.owner, "date", rule.date_override)

		existing = seen.get(key)
		if existing is not None and existing.id != rule.id:
			raise DuplicateRuleError(
				f"Rule {rule.id} collides with rule {existing.id} ({key[1]} {key[2]}) for owner {rule.owner}"
			)
		seen[key] = rule
