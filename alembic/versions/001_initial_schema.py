"""001 – Initial schema: auth, employees, team modules, chat, audit.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18 10:00:00.000000+00:00
"""

from alembic import op

# Revision identifiers
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

ENUM_TYPES: list[tuple[str, list[str]]] = [
    ("employee_role", ["admin", "member"]),
    ("task_priority", ["low", "medium", "high"]),
    ("task_status", ["pending", "in_progress", "completed"]),
    ("leave_type", ["casual", "sick", "annual", "emergency", "other"]),
    ("leave_status", ["pending", "approved", "rejected"]),
    ("channel_type", ["department", "direct", "group"]),
]


def _create_enum(name: str, values: list[str]) -> None:
    vals = ", ".join(f"'{v}'" for v in values)
    op.execute(f"CREATE TYPE {name} AS ENUM ({vals})")


def _drop_enum(name: str) -> None:
    op.execute(f"DROP TYPE IF EXISTS {name}")


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # ── Extensions ────────────────────────────────────────────────────────
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ── Enum types ────────────────────────────────────────────────────────
    for name, values in ENUM_TYPES:
        _create_enum(name, values)

    # ── 1. auth_users ─────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE auth_users (
            id               UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            email            VARCHAR(255) NOT NULL UNIQUE,
            password_hash    VARCHAR(255) NOT NULL,
            last_sign_in_at  TIMESTAMPTZ,
            created_at       TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # ── 2. user_sessions ──────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE user_sessions (
            id                  UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            user_id             UUID NOT NULL REFERENCES auth_users(id) ON DELETE CASCADE,
            token_hash          VARCHAR(128) NOT NULL,
            refresh_token_hash  VARCHAR(128),
            ip_address          VARCHAR(45),
            user_agent          TEXT,
            expires_at          TIMESTAMPTZ NOT NULL,
            is_revoked          BOOLEAN NOT NULL DEFAULT FALSE,
            created_at          TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_user_sessions_user_id            ON user_sessions(user_id)")
    op.execute("CREATE INDEX ix_user_sessions_token_hash         ON user_sessions(token_hash)")
    op.execute("CREATE INDEX ix_user_sessions_refresh_token_hash ON user_sessions(refresh_token_hash)")

    # ── 3. employees ──────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE employees (
            id           UUID PRIMARY KEY REFERENCES auth_users(id) ON DELETE CASCADE,
            name         VARCHAR(150) NOT NULL,
            email        VARCHAR(255) NOT NULL UNIQUE,
            role         employee_role NOT NULL DEFAULT 'member',
            department   VARCHAR(100),
            designation  VARCHAR(100),
            phone        VARCHAR(20),
            is_active    BOOLEAN NOT NULL DEFAULT TRUE,
            created_at   TIMESTAMPTZ DEFAULT NOW(),
            updated_at   TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # ── 4. tasks ──────────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE tasks (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            title        VARCHAR(255) NOT NULL,
            description  TEXT,
            assigned_to  UUID REFERENCES employees(id) ON DELETE SET NULL,
            priority     task_priority NOT NULL DEFAULT 'medium',
            status       task_status NOT NULL DEFAULT 'pending',
            due_date     DATE,
            created_by   UUID REFERENCES employees(id) ON DELETE SET NULL,
            created_at   TIMESTAMPTZ DEFAULT NOW(),
            updated_at   TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_tasks_assigned_status ON tasks(assigned_to, status)")

    # ── 5. leave_requests ─────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_requests (
            id                UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id       UUID NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            leave_type        leave_type NOT NULL,
            start_date        DATE NOT NULL,
            end_date          DATE NOT NULL,
            reason            TEXT,
            status            leave_status NOT NULL DEFAULT 'pending',
            rejection_reason  TEXT,
            approved_by       UUID REFERENCES employees(id) ON DELETE SET NULL,
            approved_at       TIMESTAMPTZ,
            created_at        TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT ck_leave_requests_dates CHECK (end_date >= start_date)
        )
    """)
    op.execute(
        "CREATE INDEX ix_leave_requests_employee_status ON leave_requests(employee_id, status)"
    )

    # ── 6. attendance ─────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE attendance (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id  UUID NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            date         DATE NOT NULL,
            check_in     TIMESTAMPTZ NOT NULL,
            check_out    TIMESTAMPTZ,
            image_url    TEXT,
            created_at   TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT uq_attendance_employee_date UNIQUE (employee_id, date)
        )
    """)

    # ── 7. clients ────────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE clients (
            id                  UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            name                VARCHAR(200) NOT NULL,
            company             VARCHAR(200),
            email               VARCHAR(255),
            phone               VARCHAR(30),
            website             VARCHAR(500),
            description         TEXT,
            is_client_of_month  BOOLEAN NOT NULL DEFAULT FALSE,
            is_active           BOOLEAN NOT NULL DEFAULT TRUE,
            created_by          UUID REFERENCES employees(id) ON DELETE SET NULL,
            created_at          TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    # At most one flagged row
    op.execute(
        "CREATE UNIQUE INDEX uq_clients_client_of_month ON clients(is_client_of_month) "
        "WHERE is_client_of_month"
    )

    # ── 8. meetings ───────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE meetings (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            title        VARCHAR(255) NOT NULL,
            description  TEXT,
            datetime     TIMESTAMPTZ NOT NULL,
            meet_link    VARCHAR(500),
            created_by   UUID REFERENCES employees(id) ON DELETE SET NULL,
            attendees    JSON NOT NULL DEFAULT '[]',
            created_at   TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_meetings_datetime ON meetings(datetime)")

    # ── 9. channels / messages ────────────────────────────────────────────
    op.execute("""
        CREATE TABLE channels (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            name        VARCHAR(100) NOT NULL,
            type        channel_type NOT NULL DEFAULT 'group',
            created_at  TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE TABLE messages (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            channel_id  UUID NOT NULL REFERENCES channels(id) ON DELETE CASCADE,
            sender_id   UUID REFERENCES employees(id) ON DELETE SET NULL,
            content     TEXT NOT NULL,
            created_at  TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_messages_channel_created ON messages(channel_id, created_at)")

    # ── 10. work_updates / learning_updates ───────────────────────────────
    op.execute("""
        CREATE TABLE work_updates (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id  UUID NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            hour         VARCHAR(20) NOT NULL,
            description  TEXT NOT NULL,
            file_url     TEXT,
            created_at   TIMESTAMPTZ DEFAULT NOW(),
            updated_at   TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE TABLE learning_updates (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id  UUID NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            hour         VARCHAR(20) NOT NULL,
            topic        VARCHAR(200) NOT NULL,
            notes        TEXT,
            created_at   TIMESTAMPTZ DEFAULT NOW(),
            updated_at   TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_work_updates_employee_created     ON work_updates(employee_id, created_at)")
    op.execute("CREATE INDEX ix_learning_updates_employee_created ON learning_updates(employee_id, created_at)")

    # ── 11. announcements ─────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE announcements (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            title       VARCHAR(255) NOT NULL,
            message     TEXT NOT NULL,
            is_active   BOOLEAN NOT NULL DEFAULT TRUE,
            created_by  UUID REFERENCES employees(id) ON DELETE SET NULL,
            created_at  TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # ── 12. audit_trail ───────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE audit_trail (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            actor_id     UUID,
            action       VARCHAR(50) NOT NULL,
            entity_type  VARCHAR(50) NOT NULL,
            entity_id    UUID NOT NULL,
            old_values   JSON,
            new_values   JSON,
            ip_address   VARCHAR(45),
            created_at   TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_audit_trail_entity     ON audit_trail(entity_type, entity_id)")
    op.execute("CREATE INDEX ix_audit_trail_created_at ON audit_trail(created_at)")

    # ── Seed: default chat channels ───────────────────────────────────────
    op.execute(
        "INSERT INTO channels (name, type) VALUES "
        "('General', 'department'), ('Announcements', 'department')"
    )


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    # Drop tables in reverse dependency order
    tables = [
        "audit_trail",
        "announcements",
        "learning_updates",
        "work_updates",
        "messages",
        "channels",
        "meetings",
        "clients",
        "attendance",
        "leave_requests",
        "tasks",
        "employees",
        "user_sessions",
        "auth_users",
    ]
    for t in tables:
        op.execute(f"DROP TABLE IF EXISTS {t} CASCADE")

    # Drop enum types
    for name, _ in reversed(ENUM_TYPES):
        _drop_enum(name)

    # Drop extensions
    op.execute('DROP EXTENSION IF EXISTS "uuid-ossp"')
