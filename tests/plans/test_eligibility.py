from mess_attendance.core.enums import Meal
from mess_attendance.plans.eligibility import resolve_eligible_meals
from mess_attendance.plans.model import Plan


def test_full_plan_resolves_all_meals():
    assert resolve_eligible_meals("Breakfast, Lunch, Dinner") == {Meal.BREAKFAST, Meal.LUNCH, Meal.DINNER}


def test_matching_is_case_insensitive_substring():
    assert resolve_eligible_meals("LUNCH+dinner only") == {Meal.LUNCH, Meal.DINNER}


def test_abbreviations_resolve_to_no_meals():
    assert resolve_eligible_meals("B, L, D") == frozenset()


def test_empty_text_resolves_to_no_meals():
    assert resolve_eligible_meals("") == frozenset()
    assert resolve_eligible_meals(None) == frozenset()


def test_plan_caches_eligibility_on_load():
    plan = Plan.from_row({"plan_id": 3, "plan_name": "Morning", "meals": "Breakfast"})

    assert plan.eligible_meals == {Meal.BREAKFAST}
    assert plan.includes(Meal.BREAKFAST)
    assert not plan.includes(Meal.DINNER)
