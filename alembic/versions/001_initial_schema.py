"""Initial schema for cases, shared entities and admin tokens

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Enums are stored as their string values in VARCHAR columns
ENUM = sa.String(64)


def _person_link_table(name: str, parent_table: str, parent_column: str, with_comments: bool = False) -> None:
    columns = [
        sa.Column(parent_column, sa.Integer(), nullable=False),
        sa.Column('person_id', sa.Integer(), nullable=False),
    ]
    if with_comments:
        columns.append(sa.Column('comments', sa.Text(), nullable=True))
    op.create_table(
        name,
        *columns,
        sa.ForeignKeyConstraint([parent_column], [f'{parent_table}.id']),
        sa.ForeignKeyConstraint(['person_id'], ['people.id']),
        sa.PrimaryKeyConstraint(parent_column, 'person_id')
    )
    op.create_index(f'ix_{name}_person_id', name, ['person_id'])


PROCEEDING_PERSON_TABLES = (
    'proceeding_plaintiffs',
    'proceeding_defendants',
    'proceeding_plaintiff_advocates',
    'proceeding_defendant_advocates',
)


def upgrade() -> None:
    # Create cases table
    op.create_table(
        'cases',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('case_name', sa.String(255), nullable=False),
        sa.Column('case_type', ENUM, nullable=False),
        sa.Column('case_status', ENUM, nullable=False),
        sa.Column('case_description', sa.Text(), nullable=False),
        sa.Column('case_date_filed', sa.Date(), nullable=False),
        sa.Column('case_date_closed', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_cases_id', 'cases', ['id'])
    op.create_index('ix_cases_case_name', 'cases', ['case_name'])
    op.create_index('ix_cases_case_type', 'cases', ['case_type'])
    op.create_index('ix_cases_case_status', 'cases', ['case_status'])
    op.create_index('ix_cases_case_date_filed', 'cases', ['case_date_filed'])

    # Create people table
    op.create_table(
        'people',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('person_name', sa.String(255), nullable=False),
        sa.Column('aadhaar_number', sa.String(14), nullable=True),
        sa.Column('phone_number', sa.String(32), nullable=True),
        sa.Column('person_address', sa.Text(), nullable=False),
        sa.Column('person_gender', ENUM, nullable=False),
        sa.Column('person_dob', sa.Date(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('aadhaar_number')
    )
    op.create_index('ix_people_id', 'people', ['id'])
    op.create_index('ix_people_person_name', 'people', ['person_name'])

    # Create documents table
    op.create_table(
        'documents',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('case_id', sa.Integer(), nullable=True),
        sa.Column('document_name', sa.String(255), nullable=False),
        sa.Column('document_type', ENUM, nullable=False),
        sa.Column('document_date', sa.Date(), nullable=False),
        sa.Column('document_content_url', sa.String(1024), nullable=False),
        sa.ForeignKeyConstraint(['case_id'], ['cases.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('document_name', 'document_content_url', name='uq_documents_name_url')
    )
    op.create_index('ix_documents_id', 'documents', ['id'])
    op.create_index('ix_documents_case_id', 'documents', ['case_id'])

    # Create authorities table
    op.create_table(
        'authorities',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('global_id', sa.String(128), nullable=False),
        sa.Column('authority_name', sa.String(255), nullable=False),
        sa.Column('authority_type', ENUM, nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('global_id')
    )
    op.create_index('ix_authorities_id', 'authorities', ['id'])

    # Create incidents table
    op.create_table(
        'incidents',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('case_id', sa.Integer(), nullable=False),
        sa.Column('incident_date_from', sa.Date(), nullable=False),
        sa.Column('incident_date_to', sa.Date(), nullable=False),
        sa.Column('incident_location', sa.String(255), nullable=False),
        sa.Column('incident_status', sa.String(64), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('incident_report_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['case_id'], ['cases.id']),
        sa.ForeignKeyConstraint(['incident_report_id'], ['documents.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_incidents_id', 'incidents', ['id'])
    op.create_index('ix_incidents_case_id', 'incidents', ['case_id'])

    _person_link_table('incident_victims', 'incidents', 'incident_id', with_comments=True)
    _person_link_table('incident_witnesses', 'incidents', 'incident_id', with_comments=True)

    # Create evidences table
    op.create_table(
        'evidences',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('case_id', sa.Integer(), nullable=False),
        sa.Column('evidence_name', sa.String(255), nullable=False),
        sa.Column('evidence_description', sa.Text(), nullable=False),
        sa.Column('evidence_date_found', sa.Date(), nullable=False),
        sa.Column('evidence_location', sa.String(255), nullable=False),
        sa.ForeignKeyConstraint(['case_id'], ['cases.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_evidences_id', 'evidences', ['id'])
    op.create_index('ix_evidences_case_id', 'evidences', ['case_id'])

    # Create sentences table
    op.create_table(
        'sentences',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('case_id', sa.Integer(), nullable=False),
        sa.Column('sentence_date', sa.Date(), nullable=False),
        sa.Column('sentence_type', ENUM, nullable=False),
        sa.Column('sentence_duration', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['case_id'], ['cases.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_sentences_id', 'sentences', ['id'])
    op.create_index('ix_sentences_case_id', 'sentences', ['case_id'])

    # Create sentence_people table
    op.create_table(
        'sentence_people',
        sa.Column('sentence_id', sa.Integer(), nullable=False),
        sa.Column('person_id', sa.Integer(), nullable=False),
        sa.Column('compliance_status', ENUM, nullable=False),
        sa.Column('compliance_notes', sa.Text(), nullable=True),
        sa.Column('supervision_level', ENUM, nullable=False),
        sa.Column('rehabilitation_status', ENUM, nullable=False),
        sa.Column('appeal_status', ENUM, nullable=False),
        sa.ForeignKeyConstraint(['sentence_id'], ['sentences.id']),
        sa.ForeignKeyConstraint(['person_id'], ['people.id']),
        sa.PrimaryKeyConstraint('sentence_id', 'person_id')
    )
    op.create_index('ix_sentence_people_person_id', 'sentence_people', ['person_id'])

    # Create investigating_authorities table
    op.create_table(
        'investigating_authorities',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('case_id', sa.Integer(), nullable=False),
        sa.Column('authority_id', sa.Integer(), nullable=False),
        sa.Column('date_from', sa.Date(), nullable=False),
        sa.Column('date_to', sa.Date(), nullable=True),
        sa.ForeignKeyConstraint(['case_id'], ['cases.id']),
        sa.ForeignKeyConstraint(['authority_id'], ['authorities.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_investigating_authorities_id', 'investigating_authorities', ['id'])
    op.create_index('ix_investigating_authorities_case_id', 'investigating_authorities', ['case_id'])
    op.create_index('ix_investigating_authorities_authority_id', 'investigating_authorities', ['authority_id'])

    # Create proceedings table
    op.create_table(
        'proceedings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('case_id', sa.Integer(), nullable=False),
        sa.Column('proceeding_type', ENUM, nullable=False),
        sa.Column('proceeding_status', ENUM, nullable=False),
        sa.Column('date_started', sa.Date(), nullable=False),
        sa.Column('date_ended', sa.Date(), nullable=True),
        sa.Column('proceeding_notes', sa.Text(), nullable=True),
        sa.Column('presiding_officers', sa.Text(), nullable=False),
        sa.Column('court_authority_id', sa.Integer(), nullable=True),
        sa.Column('judge_id', sa.Integer(), nullable=True),
        sa.Column('transcript_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['case_id'], ['cases.id']),
        sa.ForeignKeyConstraint(['court_authority_id'], ['authorities.id']),
        sa.ForeignKeyConstraint(['judge_id'], ['people.id']),
        sa.ForeignKeyConstraint(['transcript_id'], ['documents.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_proceedings_id', 'proceedings', ['id'])
    op.create_index('ix_proceedings_case_id', 'proceedings', ['case_id'])
    op.create_index('ix_proceedings_judge_id', 'proceedings', ['judge_id'])

    # Create proceeding_other_documents table
    op.create_table(
        'proceeding_other_documents',
        sa.Column('proceeding_id', sa.Integer(), nullable=False),
        sa.Column('document_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['proceeding_id'], ['proceedings.id']),
        sa.ForeignKeyConstraint(['document_id'], ['documents.id']),
        sa.PrimaryKeyConstraint('proceeding_id', 'document_id')
    )
    op.create_index('ix_proceeding_other_documents_document_id', 'proceeding_other_documents', ['document_id'])

    for table in PROCEEDING_PERSON_TABLES:
        _person_link_table(table, 'proceedings', 'proceeding_id')

    # Create admin_tokens table
    op.create_table(
        'admin_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('token', sa.String(255), nullable=False),
        sa.Column('description', sa.String(255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('last_used_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('token')
    )
    op.create_index('ix_admin_tokens_id', 'admin_tokens', ['id'])
    op.create_index('ix_admin_tokens_token_active', 'admin_tokens', ['token', 'is_active'])


def downgrade() -> None:
    op.drop_table('admin_tokens')
    for table in reversed(PROCEEDING_PERSON_TABLES):
        op.drop_table(table)
    op.drop_table('proceeding_other_documents')
    op.drop_table('proceedings')
    op.drop_table('investigating_authorities')
    op.drop_table('sentence_people')
    op.drop_table('sentences')
    op.drop_table('evidences')
    op.drop_table('incident_witnesses')
    op.drop_table('incident_victims')
    op.drop_table('incidents')
    op.drop_table('authorities')
    op.drop_table('documents')
    op.drop_table('people')
    op.drop_table('cases')
