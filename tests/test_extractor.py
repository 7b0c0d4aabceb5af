from __future__ import annotations

import pytest

from tari_deploy.errors import MissingPublishedTemplate
from tari_deploy.models.outcome import SubstateDiff
from tari_deploy.services.extractor import extract_template_address, substate_kind


def test_first_template_in_returned_order():
    diff = SubstateDiff(
        created=(
            {"Component": "component_01"},
            {"Template": "tpl-first"},
            {"Template": "tpl-second"},
        )
    )
    assert extract_template_address(diff) == "tpl-first"


def test_string_substate_ids():
    addr = "template_" + "c0" * 32
    diff = SubstateDiff(created=("component_" + "aa" * 32, addr))
    assert extract_template_address(diff) == addr


def test_no_template_entry():
    diff = SubstateDiff(created=({"Component": "component_01"},), destroyed=({"Template": "old"},))
    with pytest.raises(MissingPublishedTemplate) as ei:
        extract_template_address(diff, transaction_id="tx-7")
    assert "tx-7" in str(ei.value)


def test_empty_diff():
    with pytest.raises(MissingPublishedTemplate):
        extract_template_address(SubstateDiff())


@pytest.mark.parametrize(
    "substate_id, kind",
    [
        ({"Template": "x"}, "template"),
        ({"Resource": "x"}, "resource"),
        ("vault_ff", "vault"),
        ("nounderscore", None),
        (42, None),
    ],
)
def test_substate_kind(substate_id, kind):
    assert substate_kind(substate_id) == kind
