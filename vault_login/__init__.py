"""
vault-login - Vault Kubernetes auth bootstrap

Logs a workload in to HashiCorp Vault with its service account token and
stores the issued token and accessor for other containers.

Architecture:
- Each module is self-contained with clear interfaces
- Configuration is read once and passed down explicitly
- A single login attempt per process; any failure aborts the process

Modules:
- trust: Certificate trust pool for the Vault TLS connection
- auth: Login exchange and response validation
- identity: Workload identity token
- storage: Credential files
"""

__version__ = "1.0.0"
