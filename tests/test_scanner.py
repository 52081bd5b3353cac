from xml.parsers import expat

import pytest

from mnbarf.core.exceptions import PayloadNotFound
from mnbarf.soap_service.scanner import (
    CharData,
    EndElement,
    StartElement,
    find_payload,
    find_soap_body,
    first_char_data,
    iter_tokens,
)

SOAP11 = "http://schemas.xmlsoap.org/soap/envelope/"
SOAP12 = "http://www.w3.org/2003/05/soap-envelope"


def byte_chunks(data: bytes, size: int = 1):
    return [data[i : i + size] for i in range(0, len(data), size)]


class TestIterTokens:
    def test_tokens_with_namespaces(self):
        doc = f'<s:Envelope xmlns:s="{SOAP11}"><s:Body><a>x</a></s:Body></s:Envelope>'
        assert list(iter_tokens([doc.encode()])) == [
            StartElement(SOAP11, "Envelope"),
            StartElement(SOAP11, "Body"),
            StartElement("", "a"),
            CharData("x"),
            EndElement("", "a"),
            EndElement(SOAP11, "Body"),
            EndElement(SOAP11, "Envelope"),
        ]

    def test_entities_and_chunk_boundaries_are_coalesced(self):
        doc = b"<r>&lt;Day date=&quot;2020-08-14&quot;&gt;</r>"
        tokens = list(iter_tokens(byte_chunks(doc)))
        assert tokens[1] == CharData('<Day date="2020-08-14">')

    def test_cdata_is_char_data(self):
        doc = b"<r>pre<![CDATA[<x a='1'>&amp;</x>]]></r>"
        tokens = list(iter_tokens([doc]))
        assert tokens[1] == CharData("pre<x a='1'>&amp;</x>")

    def test_malformed_raises(self):
        with pytest.raises(expat.ExpatError):
            list(iter_tokens([b"<a><b></a>"]))


class TestFindSoapBody:
    @pytest.mark.parametrize("ns", [SOAP11, SOAP12, SOAP12 + "/"])
    def test_soap_namespaces(self, ns):
        doc = f'<e:Envelope xmlns:e="{ns}"><e:Header/><e:Body/></e:Envelope>'
        tokens = iter_tokens([doc.encode()])
        assert find_soap_body(tokens) == StartElement(ns, "Body")

    def test_unprefixed_and_case_insensitive(self):
        tokens = iter_tokens([b"<Envelope><BODY><x/></BODY></Envelope>"])
        assert find_soap_body(tokens).local == "BODY"
        assert next(tokens) == StartElement("", "x")

    def test_foreign_namespace_is_skipped(self):
        doc = (
            f'<s:Envelope xmlns:s="{SOAP11}" xmlns:o="urn:other">'
            "<o:Body>nope</o:Body><s:Body/></s:Envelope>"
        )
        tokens = iter_tokens([doc.encode()])
        assert find_soap_body(tokens) == StartElement(SOAP11, "Body")

    def test_missing_body(self):
        with pytest.raises(PayloadNotFound):
            find_soap_body(iter_tokens([b"<Envelope><Header/></Envelope>"]))


class TestFirstCharData:
    def test_skips_blank_text_and_wrappers(self):
        tokens = iter(
            [
                CharData("\n   "),
                StartElement("ns", "GetInfoResponse"),
                CharData("\n      "),
                StartElement("ns", "GetInfoResult"),
                CharData(" <payload/> "),
            ]
        )
        assert first_char_data(tokens) == "<payload/>"

    def test_end_before_text_is_eof(self):
        tokens = iter([StartElement("", "R"), EndElement("", "R")])
        with pytest.raises(PayloadNotFound):
            first_char_data(tokens)

    def test_exhausted_stream_is_eof(self):
        with pytest.raises(PayloadNotFound):
            first_char_data(iter([StartElement("", "R")]))


def test_find_payload_from_streamed_envelope(current_rates_envelope):
    payload = find_payload(byte_chunks(current_rates_envelope, 7))
    assert payload.startswith("<MNBCurrentExchangeRates>")
    assert '<Rate unit="1" curr="USD">293,01</Rate>' in payload


def test_find_payload_pretty_printed_cdata():
    doc = f"""<?xml version="1.0" encoding="utf-8"?>
<s:Envelope xmlns:s="{SOAP11}">
   <s:Body>
      <GetCentralBankBaseRateResponse xmlns="http://www.mnb.hu/webservices/">
         <GetCentralBankBaseRateResult><![CDATA[<MNBCentralBankBaseRates/>]]></GetCentralBankBaseRateResult>
      </GetCentralBankBaseRateResponse>
   </s:Body>
</s:Envelope>"""
    assert find_payload([doc.encode()]) == "<MNBCentralBankBaseRates/>"
