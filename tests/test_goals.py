"""Tests for the goal projection calculator."""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from budgetwise.engine import goals
from budgetwise.engine.errors import InvalidContributionError
from budgetwise.models.goal import EstimateBasis, Goal


TODAY = date(2024, 1, 31)
FIRST_COMPLETION = datetime(2024, 2, 1, 9, 0, tzinfo=timezone.utc)
LATER = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


def make_goal(target="100", current="0", **kwargs):
    return Goal(
        name="Emergency fund",
        target_amount=Decimal(target),
        current_amount=Decimal(current),
        **kwargs,
    )


class TestProgress:
    """Tests for percentage and remaining amount."""

    def test_partial_progress(self):
        """Test a goal a quarter of the way there."""
        result = goals.progress(make_goal(target="200", current="50"))
        assert result.percentage == pytest.approx(25.0)
        assert result.remaining == Decimal("150")

    def test_zero_target_is_zero_percent(self):
        """Test that a zero target gives 0%, not NaN or a crash."""
        result = goals.progress(make_goal(target="0", current="5"))
        assert result.percentage == 0
        assert result.remaining == Decimal("-5")

    def test_negative_target_is_zero_percent(self):
        """Test that a negative target is also guarded."""
        result = goals.progress(make_goal(target="-10", current="5"))
        assert result.percentage == 0

    def test_overshoot_is_not_clamped(self):
        """Test that overshooting gives >100% and negative remaining."""
        result = goals.progress(make_goal(target="100", current="120"))
        assert result.percentage == pytest.approx(120.0)
        assert result.remaining == Decimal("-20")


class TestEstimateCompletion:
    """Tests for the completion estimate precedence."""

    def test_allocation_uses_ceiling(self):
        """Test that 450 remaining at 200/month takes 3 months, not 2."""
        goal = make_goal(target="500", current="50", monthly_allocation=Decimal("200"))
        estimate = goals.estimate_completion(goal, TODAY)
        assert estimate.months_remaining == 3
        assert estimate.basis == EstimateBasis.ALLOCATION
        # Jan 31 + 3 months, clamped
        assert estimate.estimated_date == date(2024, 4, 30)

    def test_allocation_exact_division(self):
        """Test that an exact multiple doesn't round up."""
        goal = make_goal(target="400", monthly_allocation=Decimal("200"))
        estimate = goals.estimate_completion(goal, date(2024, 3, 10))
        assert estimate.months_remaining == 2
        assert estimate.estimated_date == date(2024, 5, 10)

    def test_allocation_wins_over_target_date(self):
        """Test precedence when both pacing and a deadline exist."""
        goal = make_goal(
            target="1000",
            monthly_allocation=Decimal("100"),
            target_date=date(2024, 6, 30),
        )
        estimate = goals.estimate_completion(goal, TODAY)
        assert estimate.basis == EstimateBasis.ALLOCATION
        assert estimate.months_remaining == 10

    def test_target_date_pass_through(self):
        """Test that the deadline is returned as-is."""
        goal = make_goal(target="1000", target_date=date(2024, 6, 20))
        estimate = goals.estimate_completion(goal, date(2024, 1, 15))
        assert estimate.basis == EstimateBasis.TARGET_DATE
        assert estimate.estimated_date == date(2024, 6, 20)
        assert estimate.months_remaining == 5

    def test_zero_allocation_falls_back_to_target_date(self):
        """Test that a zero allocation is treated as unset."""
        goal = make_goal(
            target="1000",
            monthly_allocation=Decimal("0"),
            target_date=date(2024, 6, 20),
        )
        estimate = goals.estimate_completion(goal, date(2024, 1, 15))
        assert estimate.basis == EstimateBasis.TARGET_DATE

    def test_past_target_date_gives_negative_months(self):
        """Test an overdue deadline."""
        goal = make_goal(target="1000", target_date=date(2023, 11, 15))
        estimate = goals.estimate_completion(goal, date(2024, 1, 20))
        assert estimate.estimated_date == date(2023, 11, 15)
        assert estimate.months_remaining == -2

    def test_no_pacing_is_unknown(self):
        """Test that no allocation and no deadline yields None."""
        assert goals.estimate_completion(make_goal(target="1000"), TODAY) is None

    def test_completed_goal_has_no_estimate(self):
        """Test that a reached goal yields None."""
        goal = make_goal(
            target="100",
            current="100",
            monthly_allocation=Decimal("50"),
            target_date=date(2024, 6, 1),
        )
        assert goals.estimate_completion(goal, TODAY) is None

    def test_degenerate_goal_has_no_estimate(self):
        """Test that a non-positive target yields None."""
        goal = make_goal(target="0", current="-10", target_date=date(2024, 6, 1))
        assert goals.estimate_completion(goal, TODAY) is None

    def test_datetime_today_is_truncated(self):
        """Test that a timestamp reference date is handled as a date."""
        goal = make_goal(target="400", monthly_allocation=Decimal("200"))
        estimate = goals.estimate_completion(goal, datetime(2024, 3, 10, 22, 0))
        assert estimate.estimated_date == date(2024, 5, 10)


class TestApplyContribution:
    """Tests for contributions and the completion policy."""

    def test_contribution_completes_goal(self):
        """Test that reaching the target completes the goal."""
        goal = make_goal(target="100", current="90")
        result = goals.apply_contribution(goal, 10, now=FIRST_COMPLETION)
        assert result.current_amount == Decimal("100")
        assert result.is_completed is True
        assert result.completed_at == FIRST_COMPLETION

    def test_contribution_defaults_completed_at_to_now(self):
        """Test that completed_at is stamped when no time is given."""
        before = datetime.now(timezone.utc)
        result = goals.apply_contribution(make_goal(target="100", current="90"), 10)
        assert result.completed_at is not None
        assert result.completed_at >= before

    def test_partial_contribution_does_not_complete(self):
        """Test a contribution below the target."""
        result = goals.apply_contribution(make_goal(target="100", current="10"), 20)
        assert result.current_amount == Decimal("30")
        assert result.is_completed is False
        assert result.completed_at is None

    def test_negative_correction_uncompletes_but_keeps_completed_at(self):
        """Test that dropping below target recomputes is_completed only."""
        completed = goals.apply_contribution(
            make_goal(target="100", current="90"), 10, now=FIRST_COMPLETION
        )
        result = goals.apply_contribution(completed, -5, now=LATER)
        assert result.current_amount == Decimal("95")
        assert result.is_completed is False
        assert result.completed_at == FIRST_COMPLETION

    def test_recompleting_keeps_first_completed_at(self):
        """Test that completed_at stays at the first completion."""
        completed = goals.apply_contribution(
            make_goal(target="100", current="90"), 10, now=FIRST_COMPLETION
        )
        dipped = goals.apply_contribution(completed, -5)
        result = goals.apply_contribution(dipped, 50, now=LATER)
        assert result.is_completed is True
        assert result.completed_at == FIRST_COMPLETION

    def test_reset_then_complete_sets_fresh_completed_at(self):
        """Test that only an explicit reset clears completed_at."""
        completed = goals.apply_contribution(
            make_goal(target="100", current="90"), 10, now=FIRST_COMPLETION
        )
        reset = goals.reset_progress(completed)
        assert reset.current_amount == Decimal("0")
        assert reset.is_completed is False
        assert reset.completed_at is None

        result = goals.apply_contribution(reset, 100, now=LATER)
        assert result.completed_at == LATER

    def test_further_contribution_to_completed_goal(self):
        """Test that contributing past the target keeps the timestamp."""
        completed = goals.apply_contribution(
            make_goal(target="100", current="90"), 10, now=FIRST_COMPLETION
        )
        result = goals.apply_contribution(completed, 25, now=LATER)
        assert result.current_amount == Decimal("125")
        assert result.completed_at == FIRST_COMPLETION

    def test_negative_contribution_not_clamped(self):
        """Test that corrections can take the balance below zero."""
        result = goals.apply_contribution(make_goal(target="100", current="10"), -30)
        assert result.current_amount == Decimal("-20")

    def test_float_contribution_is_exact(self):
        """Test that floats are converted via their decimal repr."""
        result = goals.apply_contribution(make_goal(target="1", current="0.2"), 0.1)
        assert result.current_amount == Decimal("0.3")

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf"), Decimal("NaN")])
    def test_non_finite_contribution_rejected(self, bad):
        """Test that NaN and infinities are explicit errors."""
        with pytest.raises(InvalidContributionError):
            goals.apply_contribution(make_goal(), bad)

    def test_non_numeric_contribution_rejected(self):
        """Test that garbage input is an explicit error."""
        with pytest.raises(InvalidContributionError):
            goals.apply_contribution(make_goal(), "ten")

    def test_stale_completed_flag_still_stamps_completed_at(self):
        """Test that completed_at follows the amounts, not a stored flag."""
        goal = make_goal(target="100", current="95", is_completed=True)
        result = goals.apply_contribution(goal, 10, now=FIRST_COMPLETION)
        assert result.is_completed is True
        assert result.completed_at == FIRST_COMPLETION

    def test_unvalidated_completed_flag_still_stamps_completed_at(self):
        """Test a record loaded without validation that claims completion."""
        goal = Goal.model_construct(
            name="Emergency fund",
            target_amount=Decimal("100"),
            current_amount=Decimal("95"),
            is_completed=True,
        )
        result = goals.apply_contribution(goal, 10, now=FIRST_COMPLETION)
        assert result.completed_at == FIRST_COMPLETION

    def test_contribution_does_not_mutate(self):
        """Test that apply_contribution returns a new goal."""
        goal = make_goal(target="100", current="90")
        goals.apply_contribution(goal, 10)
        assert goal.current_amount == Decimal("90")
        assert goal.is_completed is False


class TestProject:
    """Tests for the combined projection."""

    def test_project_active_goal(self):
        """Test a goal in progress."""
        goal = make_goal(target="500", current="50", monthly_allocation=Decimal("200"))
        projection = goals.project(goal, TODAY)
        assert projection.goal_id == goal.id
        assert projection.progress.percentage == pytest.approx(10.0)
        assert projection.estimate.months_remaining == 3
        assert projection.is_completed is False

    def test_project_completed_goal(self):
        """Test a reached goal has no estimate."""
        projection = goals.project(make_goal(target="100", current="150"), TODAY)
        assert projection.is_completed is True
        assert projection.estimate is None
        assert projection.progress.remaining == Decimal("-50")

    def test_days_remaining_until_deadline(self):
        """Test the day count to a future deadline."""
        goal = make_goal(target="1000", target_date=date(2024, 2, 10))
        assert goals.project(goal, TODAY).days_remaining == 10

    def test_days_remaining_clamped_after_deadline(self):
        """Test that a passed deadline shows 0 days, not a negative count."""
        goal = make_goal(target="1000", target_date=date(2023, 12, 1))
        assert goals.project(goal, TODAY).days_remaining == 0

    def test_days_remaining_without_deadline(self):
        """Test that a goal with no deadline has no day count."""
        assert goals.project(make_goal(target="1000"), TODAY).days_remaining is None

    def test_days_remaining_truncates_timestamp(self):
        """Test that a late-evening reference time counts as that day."""
        goal = make_goal(target="1000", target_date=date(2024, 2, 1))
        assert goals.days_remaining(goal, datetime(2024, 1, 31, 23, 30)) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
