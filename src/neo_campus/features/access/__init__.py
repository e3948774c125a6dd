"""Access feature: access validation and the security audit trail."""
