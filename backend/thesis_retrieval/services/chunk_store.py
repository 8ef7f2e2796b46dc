"""Chunk store reading ingested source chunks from Supabase."""
import json
import logging
from typing import Any, Dict, List, Optional
from supabase import create_client, Client

from ..config import SUPABASE_URL, SUPABASE_KEY, SOURCE_CHUNKS_TABLE
from ..errors import DATABASE_ERROR, ChunkStoreError, RetrievalError
from ..models.chunk import Chunk, ChunkMetadata

logger = logging.getLogger(__name__)


class ChunkStore:
    """Read-only access to the chunks ingested for each project."""

    def __init__(
        self,
        supabase_url: Optional[str] = SUPABASE_URL,
        supabase_key: Optional[str] = SUPABASE_KEY,
        table_name: str = SOURCE_CHUNKS_TABLE
    ):
        """
        Initialize the chunk store with a Supabase client.

        Args:
            supabase_url: Supabase project URL
            supabase_key: Supabase API key
            table_name: Name of the table holding source chunks

        Raises:
            ValueError: If Supabase credentials are missing
        """
        if not supabase_url or not supabase_key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY environment variables are required")

        self.table_name = table_name
        self.client: Client = create_client(supabase_url, supabase_key)

        logger.info(f"Initialized ChunkStore with table: {table_name}")

    def get_chunks_for_project(self, project_id: str) -> List[Chunk]:
        """
        Load every chunk belonging to a project, ordered by position.

        Args:
            project_id: Owning project identifier

        Returns:
            Chunks in ingestion order; empty when the project has no sources

        Raises:
            ChunkStoreError: If the database query fails
        """
        try:
            response = (
                self.client.table(self.table_name)
                .select("*")
                .eq("project_id", project_id)
                .order("order")
                .execute()
            )
        except Exception as e:
            error_msg = f"Failed to load chunks for project {project_id}: {str(e)}"
            logger.error(error_msg)
            raise ChunkStoreError(RetrievalError(
                code=DATABASE_ERROR,
                message=error_msg,
                details={"project_id": project_id},
                retryable=True,
            ))

        chunks = []
        for row in response.data or []:
            try:
                chunks.append(self._row_to_chunk(row))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed chunk row {row.get('id')}: {e}")
        logger.debug(f"Loaded {len(chunks)} chunks for project {project_id}")
        return chunks

    @staticmethod
    def _row_to_chunk(row: Dict[str, Any]) -> Chunk:
        # pgvector columns come back as "[0.1,0.2,...]" strings
        embedding = row.get("embedding")
        if isinstance(embedding, str):
            embedding = json.loads(embedding)

        metadata = None
        heading = row.get("heading")
        page_range = row.get("page_range")
        if heading or page_range:
            metadata = ChunkMetadata(
                heading=heading or None,
                page_range=tuple(page_range) if page_range else None,
            )

        return Chunk(
            id=row["id"],
            source_id=row["source_id"],
            project_id=row["project_id"],
            order=row.get("order", 0),
            text=row["text"],
            token_count=row.get("token_count", 0),
            embedding=embedding or None,
            metadata=metadata,
        )
