import asyncio
import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional

from refwriter.core.config import settings
from refwriter.schemas.text_schemas import GenerationConfig

logger = logging.getLogger(__name__)

NON_WORD_PATTERN = re.compile(r'[^\w\s]')
SENTENCE_DELIMITER_PATTERN = re.compile(r'[.!?]+')

MIN_TOPIC_LENGTH = 4          # Token di lunghezza <= 4 esclusi
MAX_TOPICS = 5
MIN_SENTENCE_LENGTH = 20      # Estremi esclusi
MAX_SENTENCE_LENGTH = 200
MAX_KEY_SENTENCES = 10

PREVIEW_KEYWORD_MIN_LENGTH = 5
PREVIEW_KEYWORD_LIMIT = 8
PREVIEW_FALLBACK_KEYWORDS = ["keywords", "extraction", "document", "content", "analysis"]


@dataclass
class DocumentSection:
    name: str
    content: str


@dataclass
class GeneratedDocument:
    """Documento generato: sezioni ordinate più i frammenti da cui è stato costruito"""
    sections: List[DocumentSection] = field(default_factory=list)
    topics: List[str] = field(default_factory=list)
    key_sentences: List[str] = field(default_factory=list)

    @property
    def content(self) -> str:
        return ''.join(section.content for section in self.sections)

    @property
    def section_names(self) -> List[str]:
        return [section.name for section in self.sections]

    def get_section(self, name: str) -> Optional[DocumentSection]:
        for section in self.sections:
            if section.name == name:
                return section
        return None


def _item(items: List[str], index: int) -> str:
    """Accesso sicuro: stringa vuota se l'indice è fuori range"""
    if -len(items) <= index < len(items):
        return items[index]
    return ""


class DocumentAnalyzer:
    """Ricava topic e frasi chiave dal testo di riferimento e assembla il documento"""

    def extract_topics(self, reference_text: str, limit: int = MAX_TOPICS) -> List[str]:
        words = NON_WORD_PATTERN.sub('', reference_text.lower()).split()
        frequency = Counter(word for word in words if len(word) > MIN_TOPIC_LENGTH)

        # sorted è stabile: a parità di frequenza vince la prima occorrenza
        ranked = sorted(frequency.items(), key=lambda item: item[1], reverse=True)
        return [word for word, _ in ranked[:limit]]

    def extract_key_sentences(self, reference_text: str, limit: int = MAX_KEY_SENTENCES) -> List[str]:
        sentences = [s.strip() for s in SENTENCE_DELIMITER_PATTERN.split(reference_text)]
        sentences = [s for s in sentences if MIN_SENTENCE_LENGTH < len(s) < MAX_SENTENCE_LENGTH]
        return sentences[:limit]

    def extract_keywords_preview(self, reference_text: str) -> List[str]:
        """Anteprima parole chiave per il pannello del materiale di riferimento"""
        if not reference_text:
            return list(PREVIEW_FALLBACK_KEYWORDS)

        candidates = [w for w in reference_text.split() if len(w) > PREVIEW_KEYWORD_MIN_LENGTH]
        return list(dict.fromkeys(candidates[:PREVIEW_KEYWORD_LIMIT]))

    def build_document(self, reference_text: str, config: Optional[GenerationConfig] = None) -> GeneratedDocument:
        config = config or GenerationConfig()
        topics = self.extract_topics(reference_text)
        sentences = self.extract_key_sentences(reference_text)
        sections: List[DocumentSection] = []

        def add(name: str, content: str):
            sections.append(DocumentSection(name=name, content=content))

        add("title", "# Analysis of Document\n\n")

        if config.include_headings:
            topic_lines = '\n'.join(f"- {topic[:1].upper()}{topic[1:]}" for topic in topics)
            add("key_topics", f"## Key Topics Identified\n{topic_lines}\n\n")

        if config.include_bullets:
            point_lines = '\n\n'.join(f"- {sentence}" for sentence in sentences[:3])
            add("main_points", f"## Main Points\n{point_lines}\n\n")

        add(
            "summary",
            f"## Content Summary\nThis {config.tone.value} analysis is based on the provided document "
            f"that contains approximately {len(reference_text)} characters.\n"
            f"The document appears to discuss topics related to {', '.join(topics[:3])}.\n\n"
        )

        if config.include_headings:
            detail_blocks = '\n\n'.join(
                f"### Point {i + 1}\n{sentence}" for i, sentence in enumerate(sentences[3:6])
            )
            add("detailed_analysis", f"## Detailed Analysis\n{detail_blocks}\n\n")

        add(
            "recommendations",
            "## Recommendations\nBased on the content analysis:\n\n"
            "1. Focus on the key topics identified above\n"
            f"2. Consider expanding on {_item(topics, 0)} and {_item(topics, 1)} in future content\n"
            f"3. Address any gaps in information about {_item(topics, -1)}\n\n"
        )

        if config.include_faq:
            add(
                "faq",
                "## Frequently Asked Questions\n\n"
                "### Q: What is the main focus of this document?\n"
                f"A: The document primarily focuses on {_item(topics, 0)} and related topics.\n\n"
                "### Q: How can this content be improved?\n"
                f"A: The content could be enhanced by expanding on {_item(topics, 1)} "
                "and providing more concrete examples.\n\n"
                "### Q: What audience is this content targeted at?\n"
                "A: Based on the analysis, this content seems to be targeted at readers "
                f"interested in {' and '.join(topics[:2])}.\n\n"
            )

        if config.include_conclusion:
            add(
                "conclusion",
                f"## Conclusion\nThe document provides valuable information on {', '.join(topics)}. "
                "With some refinement focused on the recommendations above, "
                "it could be improved significantly.\n\n"
            )

        if config.include_cta:
            add(
                "call_to_action",
                "## Next Steps\nReview the analysis and implement the suggested recommendations "
                "to enhance the document's effectiveness."
            )

        logger.debug(
            "Document built: %d sections, %d topics, %d key sentences",
            len(sections), len(topics), len(sentences)
        )
        return GeneratedDocument(sections=sections, topics=topics, key_sentences=sentences)

    async def analyze(
        self,
        reference_text: str,
        config: Optional[GenerationConfig] = None,
        delay: Optional[float] = None
    ) -> GeneratedDocument:
        """Come build_document, dopo la latenza simulata di generazione"""
        if delay is None:
            delay = settings.GENERATION_DELAY_SECONDS
        if delay > 0:
            await asyncio.sleep(delay)
        return self.build_document(reference_text, config)
