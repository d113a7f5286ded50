import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from refwriter.core.random_source import RandomSource, SeededRandomSource

logger = logging.getLogger(__name__)

CONTENT_SLOT = "{content}"

# Punteggio euristico: base "generato da AI", riduzione massima e minimo
BASE_DETECTION_SCORE = 50
MAX_SCORE_REDUCTION = 40
MIN_DETECTION_SCORE = 10
REDUCTION_PER_MATCH = 2

# Modello simulato: intero uniforme in [5, 18]
SIMULATED_SCORE_MIN = 5
SIMULATED_SCORE_MAX = 18

LOW_RISK_THRESHOLD = 20


class LanguageProcessor(ABC):
    """Classe astratta per i cataloghi linguistici usati da humanizer e stimatore"""

    @abstractmethod
    def get_sentence_templates(self) -> List[str]:
        pass

    @abstractmethod
    def get_paragraph_templates(self) -> List[str]:
        pass

    @abstractmethod
    def get_pattern_categories(self) -> Dict[str, re.Pattern]:
        pass

    @abstractmethod
    def get_connectives(self) -> List[str]:
        pass


def _alternation(words: Tuple[str, ...]) -> str:
    return "|".join(words)


class EnglishProcessor(LanguageProcessor):
    """Cataloghi per la lingua inglese"""

    SUBJECTS = ("I", "we", "you", "they", "he", "she", "it")

    VERBS = (
        "think", "believe", "feel", "know", "understand", "realize", "notice", "find", "see",
        "consider", "suggest", "propose", "argue", "claim", "state", "mention", "point out",
        "emphasize", "highlight", "note", "observe", "recognize", "acknowledge", "admit",
        "concede", "agree", "disagree", "doubt", "question", "wonder", "suspect", "assume",
        "presume", "guess", "estimate", "predict", "expect", "hope", "wish", "want", "need",
        "desire", "prefer", "choose", "decide", "plan", "intend", "attempt", "try", "manage",
        "succeed", "fail", "achieve", "accomplish", "complete", "finish", "start", "begin",
        "continue", "keep", "maintain", "sustain", "support", "help", "assist", "aid",
        "facilitate", "enable", "allow", "permit", "prevent", "stop", "halt", "cease", "end",
        "terminate", "conclude", "summarize", "review", "analyze", "examine", "investigate",
        "study", "research", "explore", "discover", "learn", "teach", "instruct", "guide",
        "direct", "lead", "follow", "pursue", "chase", "seek", "search", "look", "locate",
        "identify", "determine", "establish", "set", "fix", "repair", "correct", "adjust",
        "modify", "change", "alter", "transform", "convert", "turn", "make", "create",
        "produce", "generate", "develop", "build", "construct", "form", "shape", "design",
        "organize", "arrange", "prepare", "ready", "set up", "put", "place", "position",
        "situate", "install", "implement", "apply", "use", "utilize", "employ", "adopt", "adapt",
    )

    TRANSITIONS = (
        "In", "On", "At", "By", "For", "With", "Without", "Through", "Throughout", "During",
        "Before", "After", "Since", "Until", "While", "As", "Because", "So", "Therefore", "Thus",
        "Hence", "Consequently", "Accordingly", "As a result", "For this reason",
        "For these reasons", "In conclusion", "To conclude", "To sum up", "In summary",
        "In short", "In brief", "In other words", "That is", "Namely", "Specifically",
        "In particular", "For example", "For instance", "Such as", "Like", "Unlike",
        "In contrast", "On the other hand", "However", "Nevertheless", "Nonetheless", "Still",
        "Yet", "Even so", "Despite", "In spite of", "Although", "Though", "Even though",
        "Whereas", "On the contrary", "Conversely", "In comparison", "Similarly", "Likewise",
        "In the same way", "Also", "Moreover", "Furthermore", "In addition", "Additionally",
        "Besides", "What's more", "Not only...but also", "Both...and", "Either...or",
        "Neither...nor", "Whether...or", "Not...but", "Rather than", "Instead of", "As well as",
        "Along with", "Together with", "Including", "Especially", "Particularly", "Excluding",
        "Except", "Apart from", "Other than", "In addition to", "As for", "Regarding",
        "Concerning", "With respect to", "With regard to", "In terms of", "In relation to",
        "In connection with", "In the case of", "When it comes to", "As far as", "As long as",
        "As soon as", "As much as", "As many as", "As few as", "As little as", "As often as",
        "As early as", "As late as", "As high as", "As low as", "As big as", "As small as",
        "As good as", "As bad as", "As important as", "As necessary as", "As possible as",
        "As likely as", "As unlikely as", "As certain as", "As uncertain as", "As clear as",
        "As unclear as", "As simple as", "As complex as", "As easy as", "As difficult as",
        "As hard as", "As soft as", "As strong as", "As weak as", "As fast as", "As slow as",
        "As quick as",
    )

    FILLERS = (
        "actually", "basically", "essentially", "practically", "virtually", "literally",
        "figuratively", "technically", "theoretically", "realistically", "ideally",
        "hopefully", "thankfully", "fortunately", "unfortunately", "sadly", "regrettably",
        "apparently", "evidently", "obviously", "clearly", "plainly", "simply", "merely",
        "just", "only", "even", "still", "yet", "already", "now", "then", "soon", "later",
        "eventually", "finally", "ultimately", "fundamentally", "primarily", "mainly",
        "mostly", "largely", "partly", "partially", "somewhat", "slightly", "marginally",
        "significantly", "substantially", "considerably", "greatly", "highly", "extremely",
        "very", "quite", "rather", "fairly", "pretty",
    )

    def __init__(self):
        self._patterns = {
            "verb_phrases": re.compile(
                f"(?:{_alternation(self.SUBJECTS)}) (?:{_alternation(self.VERBS)})", re.IGNORECASE
            ),
            "transitions": re.compile(f"(?:{_alternation(self.TRANSITIONS)})", re.IGNORECASE),
            "fillers": re.compile(f"(?:{_alternation(self.FILLERS)})", re.IGNORECASE),
        }

    def get_sentence_templates(self) -> List[str]:
        return [
            "However, {content}",
            "In fact, {content}",
            "Interestingly, {content}",
            "Surprisingly, {content}",
            "Notably, {content}",
            "Specifically, {content}",
            "Particularly, {content}",
            "Especially, {content}",
            "Importantly, {content}",
            "Crucially, {content}",
            "Significantly, {content}",
            "Fundamentally, {content}",
            "Essentially, {content}",
            "Basically, {content}",
            "Primarily, {content}",
            "Mainly, {content}",
            "Mostly, {content}",
            "Largely, {content}",
            "Partly, {content}",
            "Partially, {content}",
        ]

    def get_paragraph_templates(self) -> List[str]:
        return [
            "First, {content}. Then, {content}. Finally, {content}.",
            "Initially, {content}. Subsequently, {content}. Ultimately, {content}.",
            "To begin with, {content}. Moreover, {content}. In conclusion, {content}.",
            "On one hand, {content}. On the other hand, {content}. Therefore, {content}.",
            "While {content}, {content}. As a result, {content}.",
        ]

    def get_pattern_categories(self) -> Dict[str, re.Pattern]:
        return self._patterns

    def get_connectives(self) -> List[str]:
        return ["however", "moreover", "furthermore", "nevertheless"]


class Humanizer:
    """Perturbazione stilistica probabilistica del testo, guidata dalla creatività"""

    BE_VERB_PATTERN = re.compile(r'\b(is|are|was|were)\b')
    INTENSIFIER_PATTERN = re.compile(r'\b(very|really|quite)\b')
    CONJUNCTION_PATTERN = re.compile(r'\b(and|but|or)\b')

    BE_VERB_PROBABILITY = 0.3
    INTENSIFIER_PROBABILITY = 0.4
    CONNECTIVE_PROBABILITY = 0.3

    def __init__(
        self,
        random_source: Optional[RandomSource] = None,
        language_processor: Optional[LanguageProcessor] = None
    ):
        self.random = random_source or SeededRandomSource()
        self.lang = language_processor or EnglishProcessor()
        self.modifications_applied = 0

    def humanize(self, text: str, creativity: float = 0.7) -> str:
        """
        Umanizza il testo.

        Args:
            text: Testo da umanizzare
            creativity: Probabilità (0.0-1.0) che ogni trasformazione venga applicata

        Returns:
            Il testo trasformato, mai più corto dell'originale
        """
        creativity = max(0.0, min(1.0, creativity))
        self.modifications_applied = 0
        processed = text

        if self.random.chance(creativity):
            processed = self.restructure_sentences(processed, creativity)
            processed = self.restructure_paragraphs(processed, creativity)

        for category, pattern in self.lang.get_pattern_categories().items():
            if self.random.chance(creativity):
                processed = self.vary_pattern_match(processed, pattern, category)

        if creativity > 0:
            varied = self.add_variations(processed)
            if varied != processed:
                self.modifications_applied += 1
            processed = varied

        logger.debug(
            "Humanized %d chars -> %d chars (creativity=%.2f, modifications=%d)",
            len(text), len(processed), creativity, self.modifications_applied
        )
        return processed

    def restructure_sentences(self, text: str, creativity: float) -> str:
        """Avvolge una frase ogni tre in un template di transizione"""
        templates = self.lang.get_sentence_templates()
        sentences = text.split('. ')
        for index, sentence in enumerate(sentences):
            if index % 3 == 0 and self.random.chance(creativity):
                sentences[index] = self.random.choice(templates).replace(CONTENT_SLOT, sentence)
                self.modifications_applied += 1
        return '. '.join(sentences)

    def restructure_paragraphs(self, text: str, creativity: float) -> str:
        """Inserisce un paragrafo ogni due in un template a tre proposizioni"""
        templates = self.lang.get_paragraph_templates()
        paragraphs = text.split('\n\n')
        for index, paragraph in enumerate(paragraphs):
            if index % 2 == 0 and self.random.chance(creativity):
                # Lo stesso paragrafo riempie tutti gli slot del template
                paragraphs[index] = self.random.choice(templates).replace(CONTENT_SLOT, paragraph)
                self.modifications_applied += 1
        return '\n\n'.join(paragraphs)

    def vary_pattern_match(self, text: str, pattern: re.Pattern, category: str = "") -> str:
        """Riscrive la prima occorrenza di un match scelto a caso"""
        matches = pattern.findall(text)
        if not matches:
            return text

        chosen = self.random.choice(matches)
        logger.debug("Varying %s match '%s' (%d candidates)", category, chosen, len(matches))
        self.modifications_applied += 1
        return text.replace(chosen, self.add_variations(chosen), 1)

    def add_variations(self, text: str) -> str:
        """Applica in sequenza le tre variazioni lessicali sull'intero testo"""
        variations: List[Callable[[str], str]] = [
            lambda t: self.BE_VERB_PATTERN.sub(self._append_actually, t),
            lambda t: self.INTENSIFIER_PATTERN.sub(self._append_quite, t),
            lambda t: self.CONJUNCTION_PATTERN.sub(self._append_connective, t),
        ]
        for variation in variations:
            text = variation(text)
        return text

    def _append_actually(self, match: re.Match) -> str:
        if self.random.chance(self.BE_VERB_PROBABILITY):
            return match.group(0) + ' actually'
        return match.group(0)

    def _append_quite(self, match: re.Match) -> str:
        if self.random.chance(self.INTENSIFIER_PROBABILITY):
            return match.group(0) + ' quite'
        return match.group(0)

    def _append_connective(self, match: re.Match) -> str:
        if self.random.chance(self.CONNECTIVE_PROBABILITY):
            return match.group(0) + ', ' + self.random.choice(self.lang.get_connectives())
        return match.group(0)


@dataclass
class DetectionEstimate:
    score: int
    pattern_matches: int
    verdict: str
    message: str


class DetectabilityEstimator:
    """Stima euristica della rilevabilità come testo AI"""

    def __init__(self, language_processor: Optional[LanguageProcessor] = None):
        self.lang = language_processor or EnglishProcessor()

    def count_pattern_matches(self, text: str) -> int:
        return sum(len(pattern.findall(text)) for pattern in self.lang.get_pattern_categories().values())

    def estimate_score(self, text: str) -> int:
        """Più match = punteggio più basso, sempre in [10, 50]"""
        return self.score_from_matches(self.count_pattern_matches(text))

    @staticmethod
    def score_from_matches(total_matches: int) -> int:
        reduction = min(max(total_matches, 0) * REDUCTION_PER_MATCH, MAX_SCORE_REDUCTION)
        return int(max(BASE_DETECTION_SCORE - reduction, MIN_DETECTION_SCORE))

    def estimate(self, text: str) -> DetectionEstimate:
        matches = self.count_pattern_matches(text)
        score = self.score_from_matches(matches)
        verdict, message = describe_score(score)
        return DetectionEstimate(score=score, pattern_matches=matches, verdict=verdict, message=message)

    @staticmethod
    def simulate_score(random_source: RandomSource) -> int:
        """Modello simulato: ignora il testo, intero uniforme in [5, 18]"""
        return random_source.randint(SIMULATED_SCORE_MIN, SIMULATED_SCORE_MAX)

    def compare_versions(self, original: str, humanized: str) -> Dict[str, int]:
        """Confronta versione originale e umanizzata"""
        original_matches = self.count_pattern_matches(original)
        humanized_matches = self.count_pattern_matches(humanized)
        original_score = self.score_from_matches(original_matches)
        humanized_score = self.score_from_matches(humanized_matches)

        return {
            'original_score': original_score,
            'humanized_score': humanized_score,
            'improvement': original_score - humanized_score,
            'original_matches': original_matches,
            'humanized_matches': humanized_matches,
        }


def describe_score(score: int) -> Tuple[str, str]:
    if score < LOW_RISK_THRESHOLD:
        return "low", "Your content has a low probability of being flagged as AI-generated"
    return "elevated", "Your content may be detected as AI-generated. Consider regenerating."


def humanize_text(text: str, creativity: float = 0.7, seed: Optional[int] = None) -> str:
    """Funzione rapida per umanizzare testo"""
    return Humanizer(random_source=SeededRandomSource(seed)).humanize(text, creativity)


def estimate_score(text: str) -> int:
    """Funzione rapida per il punteggio euristico"""
    return DetectabilityEstimator().estimate_score(text)
