"""
Tests for the Deal Desk Engine

Run with: python -m pytest tests/ -v
"""

import pytest
from decimal import Decimal
from dealdesk import DealProcessor
from dealdesk.models import DealInput
from dealdesk.processor import process_deal_from_dict


class TestDealProcessor:
    """Test the main deal processor."""

    @pytest.fixture
    def processor(self):
        return DealProcessor()

    @pytest.fixture
    def sample_input(self):
        """Single-tier agency deal for testing."""
        return {
            "deal_id": "D-100",
            "deal_name": "Acme Grow Deal",
            "tiers": [
                {
                    "tier_number": 1,
                    "annual_revenue": 850000,
                    "annual_gross_margin": 0.35,
                    "incentive_value": 50000
                }
            ],
            "approval": {
                "total_value": 600000,
                "has_non_standard_terms": False,
                "discount_percentage": 0,
                "contract_term": 12,
                "deal_type": "grow",
                "sales_channel": "independent_agency"
            }
        }

    def test_basic_processing(self, processor, sample_input):
        """Test basic deal processing."""
        result = processor.process_from_dict(sample_input)

        assert result["deal_summary"]["deal_name"] == "Acme Grow Deal"
        assert result["deal_summary"]["total_value"] == 600000.0
        assert result["approval"]["level"] == "SVP"
        assert result["approval"]["severity"] == "warning"
        assert "Senior Vice President" in result["approval"]["message"]

    def test_tier_metrics(self, processor, sample_input):
        result = processor.process_from_dict(sample_input)
        tier = result["tier_metrics"][0]

        assert tier["gross_profit"] == 297500.0
        assert tier["adjusted_gross_profit"] == 247500.0
        assert tier["adjusted_gross_margin"] == 0.2912

    def test_calculations(self, processor, sample_input):
        calcs = processor.process_from_dict(sample_input)["calculations"]

        assert calcs["total_revenue"]["value"] == 850000.0
        assert calcs["total_gross_margin"]["value"] == 297500.0
        assert calcs["total_incentive_value"]["value"] == 50000.0
        assert calcs["projected_net_value"]["value"] == 247500.0
        assert calcs["average_gross_margin_percent"]["value"] == 35.0
        assert "description" in calcs["forecasted_margin"]

    def test_approval_sequence(self, processor, sample_input):
        result = processor.process_from_dict(sample_input)

        steps = [s["step"] for s in result["approval_sequence"]]
        assert steps == ["RegionalDirector", "Finance", "Legal", "Executive"]
        assert result["approval_sequence"][2]["title"] == "Legal"

    def test_approval_requirements(self, processor, sample_input):
        requirements = processor.process_from_dict(sample_input)["approval_requirements"]

        assert [r["id"] for r in requirements] == [
            "D-100-RegionalDirector", "D-100-Finance", "D-100-Legal", "D-100-Executive"
        ]
        assert requirements[3]["dependencies"] == [
            "D-100-RegionalDirector", "D-100-Finance", "D-100-Legal"
        ]

    def test_channel_defaults_used_as_baseline(self, processor, sample_input):
        """Agency deal without records compares against industry defaults."""
        result = processor.process_from_dict(sample_input)

        assert result["deal_summary"]["has_baseline"] is True
        assert result["tier_metrics"][0]["growth"]["revenue"] == -0.66
        assert "revenue decrease" in result["analysis"]

    def test_explicit_baseline(self, processor, sample_input):
        sample_input["baseline"] = {"revenue": 680000, "margin": 0.30, "incentive_cost": 40000}

        result = processor.process_from_dict(sample_input)

        assert result["tier_metrics"][0]["growth"]["revenue"] == 0.25
        assert result["analysis"] == (
            "This deal structure shows positive growth in both revenue and profitability."
        )

    def test_no_baseline_without_channel(self, processor, sample_input):
        del sample_input["approval"]

        result = processor.process_from_dict(sample_input)

        assert result["deal_summary"]["has_baseline"] is False
        assert result["deal_summary"]["total_value"] == 850000.0
        assert result["calculations"]["forecasted_margin"]["value"] == 0.35
        assert result["tier_metrics"][0]["growth"]["revenue"] == 0.0

    def test_not_standard_below_annual_spend(self, processor, sample_input):
        standard = processor.process_from_dict(sample_input)["standard_deal"]

        assert standard["is_standard"] is False
        assert "Projected annual spend not between $1M-$3M" in standard["reasons"]

    def test_standard_deal(self, processor):
        result = processor.process_from_dict({
            "deal_id": "D-200",
            "deal_name": "Standard Grow",
            "tiers": [
                {"tier_number": 1, "annual_revenue": 2000000, "annual_gross_margin": 0.40,
                 "incentive_value": 50000}
            ],
            "baseline": {"revenue": 1500000, "margin": 0.38, "incentive_cost": 40000},
            "approval": {"deal_type": "grow", "sales_channel": "client_direct"},
            "deal_profile": {"analytics_tier": "silver"},
        })

        assert result["standard_deal"] == {"is_standard": True, "reasons": []}
        assert result["approval"]["level"] == "CLevel"
        assert result["approval_sequence"][-1]["step"] == "Executive"

    def test_legacy_tiers(self, processor):
        result = processor.process_from_dict({
            "deal_name": "Legacy Deal",
            "legacy_tiers": [
                {"tier_number": 1, "annual_revenue": 850000, "annual_gross_margin_percent": 35,
                 "incentive_amount": 50000}
            ],
        })

        assert result["tier_metrics"][0]["adjusted_gross_profit"] == 247500.0
        assert result["approval_requirements"][0]["id"] == "draft-RegionalDirector"

    def test_typed_input(self, processor, sample_input):
        deal = DealInput.from_dict(sample_input)

        result = processor.process(deal)

        assert result.approval["level"] == "SVP"
        assert deal.parameters.total_value == Decimal("600000")

    def test_very_large_amounts(self, processor, sample_input):
        sample_input["tiers"][0]["annual_revenue"] = 1e30
        sample_input["approval"]["total_value"] = 1e30

        result = processor.process_from_dict(sample_input)

        assert result["approval"]["level"] == "CLevel"
        assert result["tier_metrics"][0]["gross_profit"] == pytest.approx(3.5e29)
        assert result["deal_summary"]["total_value"] == 1e30

    def test_convenience_function(self, sample_input):
        result = process_deal_from_dict(sample_input)

        assert result["approval"]["level"] == "SVP"


class TestValidation:
    """Test input validation."""

    @pytest.fixture
    def processor(self):
        return DealProcessor()

    def test_requires_tiers(self, processor):
        with pytest.raises(ValueError, match="At least one tier is required"):
            processor.process_from_dict({"deal_name": "Empty", "tiers": []})

    def test_tier_limit(self, processor):
        tiers = [{"tier_number": n, "annual_revenue": 1000} for n in range(1, 7)]

        with pytest.raises(ValueError, match="Maximum of 5 tiers allowed"):
            processor.process_from_dict({"tiers": tiers})

    def test_invalid_tier_rows(self, processor):
        with pytest.raises(ValueError, match="Invalid tiers"):
            processor.process_from_dict({"tiers": [{"tier_number": 1, "annual_revenue": -5}]})

    def test_discount_out_of_range(self, processor):
        with pytest.raises(ValueError, match="discount_percentage"):
            processor.approval_level_from_dict({"total_value": 1000, "discount_percentage": 120})

    def test_negative_total_value(self, processor):
        with pytest.raises(ValueError, match="total_value cannot be negative"):
            processor.approval_level_from_dict({"total_value": -1})


class TestDictEntryPoints:

    @pytest.fixture
    def processor(self):
        return DealProcessor()

    def test_tier_metrics_from_dict(self, processor):
        result = processor.tier_metrics_from_dict({
            "tiers": [{"tier_number": 1, "annual_revenue": 850000, "annual_gross_margin_percent": 35,
                       "incentive_value": 50000}],
            "baseline": {"revenue": 680000, "margin": 0.30, "incentive_cost": 40000},
        })

        assert result["tier_metrics"][0]["growth"]["revenue"] == 0.25
        assert result["calculations"]["projected_net_value"]["value"] == 247500.0

    def test_tier_metrics_requires_tiers(self, processor):
        with pytest.raises(ValueError):
            processor.tier_metrics_from_dict({"tiers": []})

    def test_approval_level_from_dict(self, processor):
        result = processor.approval_level_from_dict({"total_value": 600000})

        assert result["level"] == "SVP"
        assert result["title"] == "Senior Vice President"
        assert result["estimated_time"] == "3-5 business days"
        assert result["factors"] == {"value": "SVP", "discount": "Manager", "contract_term": "Manager"}

    def test_approval_sequence_from_dict(self, processor):
        result = processor.approval_sequence_from_dict({
            "total_value": 600000, "deal_type": "grow", "sales_channel": "independent_agency"
        })

        assert result == {"approvers": ["RegionalDirector", "Finance", "Legal", "Executive"]}

    def test_approval_status_from_dict(self, processor):
        requirements = processor.process_from_dict({
            "deal_id": "D-100",
            "tiers": [{"tier_number": 1, "annual_revenue": 850000, "annual_gross_margin": 0.35}],
            "approval": {"total_value": 600000, "deal_type": "grow",
                         "sales_channel": "independent_agency"},
        })["approval_requirements"]
        requirements[0]["status"] = "approved"

        status = processor.approval_status_from_dict({"requirements": requirements})

        assert status["overall_status"] == "in_progress"
        assert status["progress"] == 25
        assert status["current_step"] == "Finance"
        assert status["next_actions"] == ["Waiting for Finance approval"]
        assert status["follow_up"] == ["Contact Finance (finance-team@company.com) about deal D-100"]

    def test_approval_status_missing_field(self, processor):
        with pytest.raises(ValueError, match="missing field"):
            processor.approval_status_from_dict({"requirements": [{"approver": "Finance"}]})

    def test_approval_status_invalid_status(self, processor):
        with pytest.raises(ValueError, match="Invalid status"):
            processor.approval_status_from_dict({
                "requirements": [{"id": "a", "approver": "Finance", "status": "done"}]
            })

    def test_approval_status_rejects_matrix_levels(self, processor):
        with pytest.raises(ValueError, match="Unknown workflow step"):
            processor.approval_status_from_dict({"requirements": [{"id": "a", "approver": "Manager"}]})

    def test_approval_status_unknown_dependency(self, processor):
        with pytest.raises(ValueError, match="unknown ids"):
            processor.approval_status_from_dict({
                "requirements": [{"id": "a", "approver": "Finance", "dependencies": ["zzz"]}]
            })
