"""
Document Ingestion Script for DocuChat.

This script:
1. Loads all .txt files from a directory
2. Chunks each document into word windows
3. Generates embeddings using HuggingFace API
4. Stores the chunks as Active in Supabase

Usage:
    python ingest_documents.py path/to/docs [--category HR] [--version v1.0]
"""
import argparse
import sys
import logging
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent))

from config import LOG_LEVEL, LOG_FORMAT
from logger import setup_logging
from services.chunk_store import ChunkStore
from services.chunking_engine import ChunkingEngine
from services.document_ingestor import DocumentIngestor, load_text_files
from services.embedding_model import EmbeddingModel

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ingest text documents into DocuChat")
    parser.add_argument("directory", help="Directory containing .txt files")
    parser.add_argument("--version", default="v1.0")
    parser.add_argument("--category", default="Uncategorized")
    parser.add_argument("--tag", action="append", dest="tags", default=[])
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main ingestion process."""
    setup_logging(LOG_LEVEL, LOG_FORMAT)
    args = parse_args(argv)

    try:
        embedding_model = EmbeddingModel()
        ingestor = DocumentIngestor(ChunkingEngine(), ChunkStore(embedding_model))

        logger.info("Warming up embedding model...")
        embedding_model.warmup()

        documents = load_text_files(args.directory)
        if not documents:
            logger.error(f"No documents found in {args.directory}")
            return 1

        total_chunks = 0
        for file_name, text in documents:
            if not text.strip():
                logger.warning(f"Skipping {file_name}: no text")
                continue
            chunks = ingestor.ingest(
                text, file_name, version=args.version, category=args.category, tags=args.tags
            )
            total_chunks += len(chunks)

        logger.info(f"Ingestion complete: {len(documents)} documents, {total_chunks} chunks")
        return 0

    except KeyboardInterrupt:
        logger.warning("Ingestion interrupted by user")
        return 1
    except Exception as e:
        logger.error(f"Ingestion failed: {str(e)}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
