"""
Application services behind the web layer.

Services take an AuthContext and read or write organization data through
the storage client, always scoped to the caller's current organization.
"""

from transnet.portal.access import (
    AuthContext,
    require_organization,
    require_owner,
    require_role,
    resolve_context,
)
from transnet.portal.accounts import (
    LoginForm,
    RegistrationForm,
    authenticate_user,
    register_user,
)
from transnet.portal.credentials import (
    ConnectionTestResult,
    CredentialForm,
    CredentialService,
)
from transnet.portal.errors import (
    AuthenticationRequired,
    ConflictError,
    CredentialValidationError,
    NotFoundError,
    OrganizationRequiredError,
    PermissionDeniedError,
    PortalError,
    ValidationFailed,
    field_errors,
    parse_form,
)
from transnet.portal.organizations import (
    InvitationForm,
    OrganizationForm,
    OrganizationService,
    OrganizationSettings,
)
from transnet.portal.security import TokenService, hash_password, verify_password
from transnet.portal.wallets import WalletForm, WalletService
from transnet.portal.withdrawals import (
    RequestMetadata,
    WithdrawalRecorder,
    WithdrawalRequest,
)

__all__ = [
    # Access
    "AuthContext",
    "resolve_context",
    "require_organization",
    "require_role",
    "require_owner",
    # Accounts
    "RegistrationForm",
    "LoginForm",
    "register_user",
    "authenticate_user",
    "TokenService",
    "hash_password",
    "verify_password",
    # Services
    "CredentialForm",
    "CredentialService",
    "ConnectionTestResult",
    "OrganizationForm",
    "InvitationForm",
    "OrganizationService",
    "OrganizationSettings",
    "WalletForm",
    "WalletService",
    "WithdrawalRequest",
    "WithdrawalRecorder",
    "RequestMetadata",
    # Errors
    "PortalError",
    "ValidationFailed",
    "AuthenticationRequired",
    "OrganizationRequiredError",
    "PermissionDeniedError",
    "NotFoundError",
    "ConflictError",
    "CredentialValidationError",
    "field_errors",
    "parse_form",
]
