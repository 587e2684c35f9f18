"""Pure access evaluation: subscription + usage + time -> AccessDecision."""

from fleeting.platform.billing.access.evaluator import evaluate
from fleeting.platform.billing.access.models import AccessDecision, DenialReason

__all__ = ["AccessDecision", "DenialReason", "evaluate"]
