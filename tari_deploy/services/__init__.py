"""
Deployment pipeline services.

- loader     : load_and_validate (read, validate, hash)
- session    : with_session / wallet_session (per-operation login)
- fees       : estimate_fee (dry-run publish)
- balance    : check_balance (balance guard)
- publisher  : publish_and_wait (submit + bounded wait + outcome)
- extractor  : extract_template_address
- deployer   : TemplateDeployer (orchestration with stage scopes)
- stages     : stage_scope and stage names
"""

__all__ = [
    "loader",
    "session",
    "fees",
    "balance",
    "publisher",
    "extractor",
    "deployer",
    "stages",
]
