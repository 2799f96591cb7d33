from bs4 import BeautifulSoup
import re
from nltk.tokenize import RegexpTokenizer

# Feste Stopwortliste für die Keyword-Cloud
STOPWORDS = {
    "the", "and", "is", "to", "a", "of", "in", "on", "at", "by", "for", "with",
    "as", "from", "this", "that", "it", "are", "was", "be", "or", "an", "but",
    "not", "if", "so", "we", "you", "he", "she", "they", "them", "then", "&nbsp;",
}

_TOKENIZER = RegexpTokenizer(r"\w+")


def clean_html(raw_html: str) -> str:
    """
    Entfernt <script>/<style> und alle HTML-Tags, Whitespace wird zusammengefasst.

    Args:
        raw_html (str): Eingabetext mit HTML.

    Returns:
        str: Nur noch der sichtbare Text ohne HTML-Tags.
    """
    soup = BeautifulSoup(raw_html or "", "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    return re.sub(r"\s+", " ", soup.get_text(" ")).strip()


def sanitize_text(text: str) -> str:
    text = text.replace("&nbsp;", " ").replace("\xa0", " ")
    text = re.sub(r"[^\w\s]", "", text)
    return re.sub(r"\s+", " ", text).strip()


def extract_relevant_words(text: str) -> list[str]:
    words = _TOKENIZER.tokenize(sanitize_text(text).lower())
    return [w for w in words if w not in STOPWORDS and len(w) > 2]
