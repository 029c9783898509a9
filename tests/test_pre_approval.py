import pytest

from models.errors import ValidationError
from models.pre_approval import PreApprovalEstimator


class TestPreApproval:
    def test_strong_borrower_is_capped_at_100(self):
        # credit +30, DTI 10% +20, LTV 80% +15
        result = PreApprovalEstimator(120_000, 1_000, 780, 100_000, 500_000).estimate()

        assert result.approval_likelihood == 100
        assert result.estimated_rate_pct == pytest.approx(6.75)
        assert result.dti_ratio_pct == 10.0
        assert result.ltv_ratio_pct == 80.0
        assert result.recommendations == []

    def test_weak_borrower_is_floored_at_0(self):
        # credit -20, DTI 50% -20, LTV 98% -15
        result = PreApprovalEstimator(120_000, 5_000, 600, 10_000, 500_000).estimate()

        assert result.approval_likelihood == 0
        assert result.estimated_rate_pct == pytest.approx(7.75)
        assert len(result.recommendations) == 3

    def test_middle_tiers(self):
        # credit 620-659, DTI 36-43%, LTV 80-95%: no adjustments
        result = PreApprovalEstimator(120_000, 4_000, 640, 50_000, 500_000).estimate()

        assert result.approval_likelihood == 50
        assert result.estimated_rate_pct == pytest.approx(7.25)
        assert result.dti_ratio_pct == 40.0
        assert result.ltv_ratio_pct == 90.0
        assert "Consider increasing down payment to avoid PMI" in result.recommendations

    def test_invalid_inputs(self):
        with pytest.raises(ValidationError):
            PreApprovalEstimator(0, 1_000, 700, 50_000, 500_000)
        with pytest.raises(ValidationError):
            PreApprovalEstimator(100_000, 1_000, 700, 600_000, 500_000)
