from .knowledge_base import CorpusBuilder, KnowledgeBase
from .retriever import Retriever
from .team_chunker import TeamChunker
from .text_splitter import SplitStrategy, TextSplitter

__all__ = [
    "CorpusBuilder",
    "KnowledgeBase",
    "Retriever",
    "SplitStrategy",
    "TeamChunker",
    "TextSplitter",
]
