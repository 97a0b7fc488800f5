"""
PostgreSQL schema for the dashboard.

Statements are idempotent and executed on startup by
``PortalStore.ensure_schema()``.

Key Tables:
    - users, organizations, organization_memberships: tenancy
    - organization_invitations: invitation codes
    - exchange_configs: exchange API credentials per organization
    - saved_wallets: saved withdrawal destinations per organization
    - withdraw_history: locally recorded withdrawal requests
    - activity_log: audit trail
"""

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        username TEXT NOT NULL UNIQUE,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        first_name TEXT,
        last_name TEXT,
        current_organization_id TEXT,
        is_active BOOLEAN NOT NULL DEFAULT TRUE,
        last_login_at TIMESTAMPTZ,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS organizations (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        slug TEXT NOT NULL UNIQUE,
        description TEXT,
        owner_id TEXT NOT NULL REFERENCES users(id),
        is_personal BOOLEAN NOT NULL DEFAULT FALSE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS organization_memberships (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        organization_id TEXT NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
        role TEXT NOT NULL DEFAULT 'member'
            CHECK (role IN ('owner', 'admin', 'member', 'viewer')),
        status TEXT NOT NULL DEFAULT 'active'
            CHECK (status IN ('active', 'suspended', 'pending')),
        joined_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        UNIQUE (user_id, organization_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS organization_invitations (
        id TEXT PRIMARY KEY,
        organization_id TEXT NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
        invited_by TEXT NOT NULL REFERENCES users(id),
        email TEXT NOT NULL,
        role TEXT NOT NULL DEFAULT 'member'
            CHECK (role IN ('owner', 'admin', 'member', 'viewer')),
        token TEXT NOT NULL UNIQUE,
        status TEXT NOT NULL DEFAULT 'pending'
            CHECK (status IN ('pending', 'accepted', 'expired', 'cancelled')),
        expires_at TIMESTAMPTZ NOT NULL,
        accepted_at TIMESTAMPTZ,
        accepted_by TEXT REFERENCES users(id),
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS exchange_configs (
        id TEXT PRIMARY KEY,
        organization_id TEXT NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
        exchange_name TEXT NOT NULL,
        api_key TEXT,
        api_secret TEXT,
        passphrase TEXT,
        testnet BOOLEAN NOT NULL DEFAULT FALSE,
        is_active BOOLEAN NOT NULL DEFAULT TRUE,
        is_valid BOOLEAN NOT NULL DEFAULT FALSE,
        last_validation_at TIMESTAMPTZ,
        validation_error TEXT,
        created_by TEXT REFERENCES users(id),
        updated_by TEXT REFERENCES users(id),
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS saved_wallets (
        id TEXT PRIMARY KEY,
        organization_id TEXT NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
        created_by TEXT REFERENCES users(id),
        label TEXT NOT NULL,
        address TEXT NOT NULL,
        coin TEXT NOT NULL,
        network TEXT NOT NULL,
        exchange TEXT NOT NULL,
        description TEXT,
        is_shared BOOLEAN NOT NULL DEFAULT TRUE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS withdraw_history (
        id TEXT PRIMARY KEY,
        organization_id TEXT NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
        initiated_by TEXT REFERENCES users(id),
        exchange_name TEXT NOT NULL,
        coin TEXT NOT NULL,
        network TEXT NOT NULL,
        amount NUMERIC(38, 18) NOT NULL,
        address TEXT NOT NULL,
        tag TEXT,
        status TEXT NOT NULL DEFAULT 'pending'
            CHECK (status IN ('pending', 'processing', 'completed', 'failed')),
        tx_id TEXT,
        fee NUMERIC(38, 18),
        exchange_order_id TEXT,
        error TEXT,
        source TEXT NOT NULL DEFAULT 'app' CHECK (source IN ('app', 'external')),
        notes TEXT,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS activity_log (
        id TEXT PRIMARY KEY,
        organization_id TEXT REFERENCES organizations(id) ON DELETE CASCADE,
        user_id TEXT REFERENCES users(id),
        action TEXT NOT NULL,
        entity TEXT NOT NULL,
        entity_id TEXT,
        details TEXT,
        ip_address TEXT,
        user_agent TEXT,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_exchange_configs_org ON exchange_configs (organization_id)",
    "CREATE INDEX IF NOT EXISTS idx_saved_wallets_org ON saved_wallets (organization_id)",
    """
    CREATE INDEX IF NOT EXISTS idx_withdraw_history_org_created
        ON withdraw_history (organization_id, created_at DESC)
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_invitations_status_expiry
        ON organization_invitations (status, expires_at)
    """,
]
