"""
vault-login entry point.

Reads the workload identity token, logs in to Vault once and stores the
issued token and accessor. Any failure stops the process with a non-zero
exit status before a credential file is written.
"""

import logging
import sys
from typing import Optional

import click
import httpx
from dotenv import load_dotenv

from vault_login import __version__
from vault_login.config.provider import LOG_LEVELS, ConfigProvider, EnvConfigProvider
from vault_login.exceptions import ConfigError, CredentialWriteError, VaultLoginError
from vault_login.logging_config import setup_logging
from vault_login.modules.auth import AuthFactory, LoginRequest, LoginResult
from vault_login.modules.identity import describe_identity_token, read_identity_token
from vault_login.modules.storage import CredentialStore

logger = logging.getLogger(__name__)


def run(
    config_provider: ConfigProvider,
    store: Optional[CredentialStore] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> LoginResult:
    """
    Perform the full bootstrap once.

    Args:
        config_provider: Configuration provider
        store: Credential writer, defaults to CredentialStore()
        transport: Optional httpx transport override

    Returns:
        The LoginResult that was persisted
    """
    vault_config = config_provider.get_vault_config()
    output_config = config_provider.get_output_config()
    store = store or CredentialStore()

    # Read the JWT token from disk
    jwt_token = read_identity_token(output_config.service_account_path)
    identity = describe_identity_token(jwt_token)
    if identity:
        logger.info(
            f"Authenticating service account "
            f"{identity.get('namespace', '?')}/{identity.get('service_account', '?')} "
            f"as role {vault_config.role}"
        )

    # Authenticate to vault using the jwt token
    authenticator = AuthFactory.build(vault_config, transport=transport)
    request = LoginRequest.for_mount(
        address=vault_config.address,
        mount_path=vault_config.mount_path,
        role=vault_config.role,
        identity_token=jwt_token,
    )
    result = authenticator.login(request)

    store.save_token(result.credential, output_config.token_dest)
    try:
        store.save_accessor(result.credential_handle, output_config.accessor_dest)
    except CredentialWriteError:
        # Never leave a token without its accessor
        store.discard(output_config.token_dest)
        raise

    logger.info(f"successfully stored vault token at {output_config.token_dest}")
    logger.info(f"successfully stored vault accessor at {output_config.accessor_dest}")
    return result


@click.command()
@click.option(
    "--env-file",
    "env_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Load environment variables from this file before reading configuration.",
)
@click.option(
    "--log-level",
    "log_level",
    type=click.Choice(list(LOG_LEVELS), case_sensitive=False),
    default=None,
    help="Logging level (overrides LOG_LEVEL).",
)
@click.version_option(__version__, prog_name="vault-login")
def main(env_file: Optional[str], log_level: Optional[str]):
    """Log in to Vault with the pod's service account token."""
    if env_file:
        load_dotenv(env_file)

    config_provider = EnvConfigProvider()

    try:
        level = (log_level or config_provider.get_log_level()).upper()
    except ConfigError as e:
        raise click.UsageError(str(e))
    setup_logging(level)

    try:
        run(config_provider)
    except VaultLoginError as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
