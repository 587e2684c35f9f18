"""
Billing: plan catalog, subscription lifecycle, usage quotas and access decisions.
"""
