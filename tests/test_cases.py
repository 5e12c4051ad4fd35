from pathlib import Path

import pytest
import yaml

from RinsMarkdown.converter import markdown_to_html

CASES = yaml.safe_load((Path(__file__).parent / "cases.yaml").read_text(encoding="utf-8"))


@pytest.mark.parametrize("case", CASES, ids=[case["name"] for case in CASES])
def test_case(case):
    assert markdown_to_html(case["markdown"]) == case["html"]
