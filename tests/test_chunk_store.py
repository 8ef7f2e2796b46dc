"""Unit tests for ChunkStore class."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from unittest.mock import patch, MagicMock
from thesis_retrieval.errors import ChunkStoreError
from thesis_retrieval.services.chunk_store import ChunkStore


def mock_query_chain(mock_client, rows=None, error=None):
    """Wire client.table().select().eq().order().execute() to return rows."""
    query = mock_client.table.return_value.select.return_value.eq.return_value.order.return_value
    if error is not None:
        query.execute.side_effect = error
    else:
        query.execute.return_value.data = rows
    return query


class TestChunkStore:
    """Test suite for ChunkStore."""

    @patch('thesis_retrieval.services.chunk_store.create_client')
    def test_initialization_success(self, mock_create_client):
        """Test successful initialization with credentials."""
        store = ChunkStore(
            supabase_url="https://test.supabase.co",
            supabase_key="test_key"
        )

        assert store.table_name == "source_chunks"
        mock_create_client.assert_called_once_with("https://test.supabase.co", "test_key")

    def test_initialization_without_credentials(self):
        """Test initialization fails without Supabase credentials."""
        with pytest.raises(ValueError, match="SUPABASE_URL and SUPABASE_KEY"):
            ChunkStore(supabase_url=None, supabase_key="test_key")

        with pytest.raises(ValueError, match="SUPABASE_URL and SUPABASE_KEY"):
            ChunkStore(supabase_url="https://test.supabase.co", supabase_key=None)

    @patch('thesis_retrieval.services.chunk_store.create_client')
    def test_get_chunks_for_project(self, mock_create_client):
        """Test rows are mapped into Chunk objects."""
        mock_client = MagicMock()
        mock_create_client.return_value = mock_client
        mock_query_chain(mock_client, rows=[
            {
                "id": "src1_0",
                "source_id": "src1",
                "project_id": "project-1",
                "order": 0,
                "text": "Deep learning scales with data.",
                "token_count": 6,
                "embedding": [0.1, 0.2, 0.3],
                "heading": "1. Introduction",
                "page_range": [3, 4],
            },
            {
                "id": "src1_1",
                "source_id": "src1",
                "project_id": "project-1",
                "order": 1,
                "text": "Second chunk.",
                "token_count": 2,
                "embedding": None,
                "heading": None,
                "page_range": None,
            },
        ])

        store = ChunkStore(supabase_url="https://test.supabase.co", supabase_key="test_key")
        chunks = store.get_chunks_for_project("project-1")

        mock_client.table.assert_called_once_with("source_chunks")
        mock_client.table.return_value.select.return_value.eq.assert_called_once_with(
            "project_id", "project-1"
        )
        mock_client.table.return_value.select.return_value.eq.return_value.order.assert_called_once_with(
            "order"
        )

        assert len(chunks) == 2
        first, second = chunks
        assert first.id == "src1_0"
        assert first.source_id == "src1"
        assert first.token_count == 6
        assert first.embedding == [0.1, 0.2, 0.3]
        assert first.metadata.heading == "1. Introduction"
        assert first.metadata.page_range == (3, 4)
        assert first.citation == "1. Introduction"
        assert second.embedding is None
        assert second.metadata is None
        assert second.citation == "Section"

    @patch('thesis_retrieval.services.chunk_store.create_client')
    def test_pgvector_string_embedding_parsed(self, mock_create_client):
        mock_client = MagicMock()
        mock_create_client.return_value = mock_client
        mock_query_chain(mock_client, rows=[{
            "id": "src1_0",
            "source_id": "src1",
            "project_id": "project-1",
            "order": 0,
            "text": "Some text",
            "embedding": "[0.5,0.25]",
        }])

        store = ChunkStore(supabase_url="https://test.supabase.co", supabase_key="test_key")
        chunk = store.get_chunks_for_project("project-1")[0]

        assert chunk.embedding == [0.5, 0.25]
        assert chunk.token_count == 0

    @patch('thesis_retrieval.services.chunk_store.create_client')
    def test_empty_project(self, mock_create_client):
        mock_client = MagicMock()
        mock_create_client.return_value = mock_client
        mock_query_chain(mock_client, rows=[])

        store = ChunkStore(supabase_url="https://test.supabase.co", supabase_key="test_key")

        assert store.get_chunks_for_project("project-1") == []

    @patch('thesis_retrieval.services.chunk_store.create_client')
    def test_database_error(self, mock_create_client):
        """Test that database errors are wrapped in ChunkStoreError."""
        mock_client = MagicMock()
        mock_create_client.return_value = mock_client
        mock_query_chain(mock_client, error=Exception("Database connection failed"))

        store = ChunkStore(supabase_url="https://test.supabase.co", supabase_key="test_key")

        with pytest.raises(ChunkStoreError, match="Failed to load chunks") as exc_info:
            store.get_chunks_for_project("project-1")

        assert exc_info.value.error.code == "DATABASE_ERROR"
        assert exc_info.value.error.details == {"project_id": "project-1"}

    @patch('thesis_retrieval.services.chunk_store.create_client')
    def test_malformed_rows_skipped(self, mock_create_client):
        """Test that rows without usable text do not drop the whole project."""
        mock_client = MagicMock()
        mock_create_client.return_value = mock_client
        mock_query_chain(mock_client, rows=[
            {"id": "src1_0", "source_id": "src1", "project_id": "project-1", "order": 0, "text": ""},
            {"id": "src1_1", "source_id": "src1", "project_id": "project-1", "order": 1, "text": None},
            {"id": "src1_2", "source_id": "src1", "project_id": "project-1", "order": 2},
            {"id": "src1_3", "source_id": "src1", "project_id": "project-1", "order": 3,
             "text": "Valid chunk.", "embedding": "[0.1,"},
            {"id": "src1_4", "source_id": "src1", "project_id": "project-1", "order": 4,
             "text": "Kept chunk."},
        ])

        store = ChunkStore(supabase_url="https://test.supabase.co", supabase_key="test_key")
        chunks = store.get_chunks_for_project("project-1")

        assert [chunk.id for chunk in chunks] == ["src1_4"]
