from dataclasses import dataclass

import pytest

from RinsMarkdown import model
from RinsMarkdown.errors import MissingChildError, UnknownNodeKindError
from RinsMarkdown.markdown_parser import parse_markdown
from RinsMarkdown.model import (
    Block,
    CodeBlock,
    Document,
    EmptyLine,
    EndOfInput,
    Heading,
    HorizontalRule,
    InlineImage,
    InlineLink,
    Paragraph,
    ParagraphLine,
    PlainText,
    Quote,
    Span,
)
from RinsMarkdown.renderer_html import (
    _BLOCK_RENDERERS,
    _INLINE_RENDERERS,
    escape_html,
    render_block,
    render_document,
    render_inline,
)


def render(text):
    return render_document(parse_markdown(text))


def span(text):
    return Span(text, 0, len(text))


def test_end_to_end_example():
    assert render("# Title\n---\n\nHello **world**!") == [
        "<h1>Title</h1>",
        "<hr>",
        "<br/>",
        "<p>Hello <strong>world</strong>!</p>",
    ]


def test_paragraph_lines_joined_with_single_break():
    assert render("line1\nline2") == ["<p>line1<br>line2</p>"]
    assert render("only") == ["<p>only</p>"]


def test_headings():
    assert render("## Two\n### <Three>") == ["<h2>Two</h2>", "<h3>&lt;Three&gt;</h3>"]


def test_text_is_escaped_once():
    assert render("a < b & 'c' \"d\"") == ["<p>a &lt; b &amp; &#x27;c&#x27; &quot;d&quot;</p>"]
    assert render("&lt;") == ["<p>&amp;lt;</p>"]


def test_styles():
    assert render("*i* __u__ ~~s~~ \\*e\\*") == ["<p><em>i</em> <u>u</u> <del>s</del> *e*</p>"]


def test_nested_spans():
    assert render("_a**b~~c[d](e)f~~g**h_") == [
        '<p><em>a<strong>b<del>c<a href="e">d</a>f</del>g</strong>h</em></p>'
    ]


def test_link_url_is_not_escaped():
    assert render("[a & b](http://x.com/?a=1&b=2)") == ['<p><a href="http://x.com/?a=1&b=2">a &amp; b</a></p>']


def test_image():
    assert render('![alt "x"](img.png)') == ['<p><img src="img.png" alt="alt &quot;x&quot;"></p>']


def test_code_block_is_escaped_but_not_styled():
    source = "```py\nif a < b:\n    print('**x**')\n```"
    assert render(source) == [
        '<pre><code class="language-py">if a &lt; b:\n    print(&#x27;**x**&#x27;)</code></pre>'
    ]


def test_quote():
    assert render("> hi **there**\n> again") == ["<blockquote><p>hi <strong>there</strong><br>again</p></blockquote>"]


def test_one_fragment_per_block():
    source = "# A\n\nOne\ntwo\n\n```\nx\n```\n> q\n***\n## B\nThree"
    fragments = render(source)
    assert fragments == [
        "<h1>A</h1>",
        "<br/>",
        "<p>One<br>two</p>",
        "<br/>",
        '<pre><code class="language-">x</code></pre>',
        "<blockquote><p>q</p></blockquote>",
        "<hr>",
        "<h2>B</h2>",
        "<p>Three</p>",
    ]


def test_empty_document():
    assert render_document(Document(blocks=(), end=EndOfInput(0))) == []


def test_escape_html():
    assert escape_html("<&>\"'") == "&lt;&amp;&gt;&quot;&#x27;"


@pytest.mark.parametrize(
    "block, parent",
    [
        (Heading(level=1, text=None), "heading"),
        (CodeBlock(lang=None, content=span("x")), "code_block"),
        (CodeBlock(lang=span("py"), content=None), "code_block"),
        (Quote(body=None), "quote"),
    ],
)
def test_missing_child(block, parent):
    with pytest.raises(MissingChildError) as info:
        render_block(block)
    assert info.value.parent == parent


@pytest.mark.parametrize(
    "node, expected",
    [
        (InlineLink(text=None, url=span("u")), "link_text"),
        (InlineLink(text=span("t"), url=None), "url"),
        (InlineImage(alt=span("a"), url=None), "url"),
    ],
)
def test_missing_inline_child(node, expected):
    paragraph = Paragraph(lines=(ParagraphLine(spans=(PlainText(span("x")), node)),))
    with pytest.raises(MissingChildError) as info:
        render_block(paragraph)
    assert info.value.expected == expected


def test_unknown_node_kind():
    @dataclass(frozen=True)
    class Sidebar(Block):
        pass

    with pytest.raises(UnknownNodeKindError):
        render_block(Sidebar())
    with pytest.raises(UnknownNodeKindError):
        render_inline([object()])


def test_every_node_kind_has_a_renderer():
    def declared(base):
        return {cls for cls in base.__subclasses__() if cls.__module__ == model.__name__}

    assert declared(model.Block) == set(_BLOCK_RENDERERS)
    assert declared(model.Inline) == set(_INLINE_RENDERERS)
    assert {EmptyLine, HorizontalRule} <= set(_BLOCK_RENDERERS)
