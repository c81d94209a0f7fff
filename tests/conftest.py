import sys
from pathlib import Path

import pytest

# Add the repository root to sys.path so we can import abnt_review and main
ROOT_PATH = Path(__file__).resolve().parent.parent
if ROOT_PATH.as_posix() not in sys.path:
    sys.path.insert(0, ROOT_PATH.as_posix())

from abnt_review.document_parser import DocumentParser  # noqa: E402
from abnt_review.models import (  # noqa: E402
    Citation,
    DocumentData,
    DocumentElement,
    ElementType,
    ReferenceEntry,
)
from abnt_review.styles import ResolvedStyle  # noqa: E402


WORD_CSS = """
<!--
/* Style Definitions */
p.MsoNormal, li.MsoNormal, div.MsoNormal
    {margin:0cm;
    text-align:justify;
    line-height:150%;
    font-size:12.0pt;
    font-family:"Times New Roman",serif;}
h1
    {font-size:14.0pt;
    font-family:"Arial",sans-serif;}
p.MsoCaption
    {font-size:10.0pt;}
-->
"""

MONOGRAPH_BODY = """
<div class=WordSection1>
<h1>1 INTRODUÇÃO</h1>
<p class=MsoNormal style='text-indent:35.4pt'>O tema foi estudado por autores
clássicos (SILVA, 2020) e revisado recentemente (COSTA, 2019a).</p>
<h1>2 REFERENCIAL TEÓRICO</h1>
<p class=MsoNormal style='text-indent:35.4pt'>A abordagem segue a proposta
original (SOUZA, 2018).</p>
<p class=MsoCaption>Figura 1 - Modelo conceitual</p>
<p class=MsoListParagraph>Primeiro item</p>
<h1>3 DESENVOLVIMENTO</h1>
<h1>4 CONCLUSÃO</h1>
</div>
<div class=WordSection2>
<p class=MsoNormal align=center style='text-align:center'><b>REFERÊNCIAS</b></p>
<p class=MsoNormal style='line-height:normal;text-align:left'>COSTA, Maria. Métodos de pesquisa. São Paulo: Atlas, 2019a.</p>
<p class=MsoNormal style='line-height:normal;text-align:left'>SILVA, João. Estudos clássicos. Rio de Janeiro: Record, 2020.</p>
<p class=MsoNormal style='line-height:normal;text-align:left'>ZANETTI, Ana. Um livro nunca citado. Curitiba: UFPR, 2015.</p>
</div>
"""


def make_html(body: str, css: str = WORD_CSS) -> str:
    """Wrap a body fragment in a minimal Word-style HTML export."""
    return (
        "<html><head><meta charset='utf-8'>"
        f"<style>{css}</style>"
        f"</head><body lang=PT-BR>{body}</body></html>"
    )


def make_element(text="", element_type=ElementType.PARAGRAPH, tag="p", **styles):
    return DocumentElement(
        tag=tag,
        class_names=frozenset(),
        text=text,
        styles=ResolvedStyle(**styles),
        element_type=element_type,
        section=1
    )


def make_heading(text):
    return make_element(text, ElementType.HEADING, tag="h1")


def make_reference(text, **styles):
    return ReferenceEntry(text=text, styles=ResolvedStyle(**styles))


def make_citation(full, paragraph_index=0, author=None, year=None):
    return Citation(
        full=full,
        content=full.strip("()"),
        paragraph_index=paragraph_index,
        source_text=full,
        author=author,
        year=year
    )


# Common test fixtures
@pytest.fixture
def monograph_html():
    return make_html(MONOGRAPH_BODY)


@pytest.fixture
def monograph_data(monograph_html):
    return DocumentParser.from_html(monograph_html).parse()


@pytest.fixture
def empty_data():
    return DocumentData()


@pytest.fixture
def monograph_file(tmp_path, monograph_html):
    """The monograph fixture written the way Word saves it."""
    path = tmp_path / "monografia.htm"
    path.write_bytes(monograph_html.encode("windows-1252"))
    return path
