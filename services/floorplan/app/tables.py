from __future__ import annotations

import sqlalchemy as sa


metadata = sa.MetaData()


def _layout_table(prefix: str) -> sa.Table:
    """
    Seats and rooms share one column layout; only the `<prefix>_` columns differ.
    Column order here is the order of the list allow-list and of SELECT *.
    """
    return sa.Table(
        f"{prefix}_table",
        metadata,
        sa.Column("auto_increment", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("company_code", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(f"{prefix}_code", sa.Integer(), nullable=False, unique=True),
        sa.Column(f"{prefix}_title", sa.Text(), nullable=False, server_default=""),
        sa.Column("title_background_color", sa.Text(), nullable=False, server_default="#000000"),
        sa.Column("title_text_color", sa.Text(), nullable=False, server_default="#FFFFFF"),
        sa.Column(f"{prefix}_background_color", sa.Text(), nullable=False, server_default="#FFFFFF"),
        sa.Column(f"{prefix}_top", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(f"{prefix}_left", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(f"{prefix}_width", sa.Integer(), nullable=False, server_default="100"),
        sa.Column(f"{prefix}_height", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("gender", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("waiting", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("release", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("hide_title", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("transparent_background", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("hide_border", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("kiosk_disabled", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("power_control", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("breaker_number", sa.Integer(), nullable=False, server_default="0"),
    )


seat_table = _layout_table("seat")
room_table = _layout_table("room")
