"""add custom substitute name and level to match

Revision ID: 9d3a6f1e7c28
Revises: 5b7e2d9c1a40
Create Date: 2026-02-03 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '9d3a6f1e7c28'
down_revision = '5b7e2d9c1a40'
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    cols = {c['name'] for c in insp.get_columns('match')}
    with op.batch_alter_table('match') as batch_op:
        for side in ('a', 'b'):
            if f'custom_substitute_{side}_name' not in cols:
                batch_op.add_column(sa.Column(f'custom_substitute_{side}_name', sa.String(length=255), nullable=True))
            if f'custom_substitute_{side}_level' not in cols:
                batch_op.add_column(sa.Column(f'custom_substitute_{side}_level', sa.Integer(), nullable=True))


def downgrade():
    with op.batch_alter_table('match') as batch_op:
        batch_op.drop_column('custom_substitute_b_level')
        batch_op.drop_column('custom_substitute_b_name')
        batch_op.drop_column('custom_substitute_a_level')
        batch_op.drop_column('custom_substitute_a_name')
