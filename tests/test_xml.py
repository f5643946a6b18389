import pytest

from paygate.utils.xml import from_xml, to_xml


def test_to_xml_wraps_values_in_cdata():
    xml = to_xml({"appid": "wx1", "body": "a<b", "empty": "", "none": None})
    assert xml == "<xml><appid><![CDATA[wx1]]></appid><body><![CDATA[a<b]]></body></xml>"


def test_roundtrip_keeps_values():
    params = {"return_code": "SUCCESS", "detail": "x]]>y", "body": "<tag>"}
    assert from_xml(to_xml(params)) == params


def test_from_xml_plain_text_and_empty_elements():
    body = "<xml><return_code>SUCCESS</return_code><return_msg></return_msg></xml>"
    assert from_xml(body) == {"return_code": "SUCCESS", "return_msg": ""}


@pytest.mark.parametrize("body", ["", "   ", "<xml><a>1</a>", "not xml", "<root><a>1</a></root>"])
def test_from_xml_rejects_bad_documents(body):
    with pytest.raises(ValueError):
        from_xml(body)
