#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""Automated tests"""

import dataclasses
import io
import json
import unittest
from contextlib import redirect_stdout
from unittest import mock

import dns.rdata
import dns.rdataclass
import dns.rdatatype

import spfparse
import spfparse._cli
import spfparse.environment
import spfparse.macro
import spfparse.record
import spfparse.serializer
import spfparse.terms
import spfparse.utils
from spfparse._constants import ERROR_CONTEXT_LEN, MACRO_EXPANSION_MAX_LEN
from spfparse.terms import Qualifier

DOMAIN = "example.com"


def _syntax_error(record: str) -> spfparse.record.SPFSyntaxError:
    try:
        spfparse.record.parse_spf_record(record, DOMAIN)
    except spfparse.record.SPFSyntaxError as error:
        return error
    raise AssertionError(f"{record} did not raise SPFSyntaxError")


class TestNormalizeDomain(unittest.TestCase):
    def testLeadingAndRepeatedDots(self):
        """Leading dots are removed and runs of dots are collapsed"""
        self.assertEqual(spfparse.utils.normalize_domain("...a..b."), ("a.b.", 4))
        self.assertEqual(spfparse.utils.normalize_domain(".a.b"), ("a.b", 3))
        self.assertEqual(spfparse.utils.normalize_domain(""), ("", 0))

    def testIdempotent(self):
        for domain in ["...a..b.", ".a.b", "", "Example..COM", "%{d}..x.example"]:
            once, _ = spfparse.utils.normalize_domain(domain)
            twice, _ = spfparse.utils.normalize_domain(once)
            self.assertEqual(once, twice)

    def testTruncationReportsTrueLength(self):
        """The untruncated length is returned so callers can detect overflow"""
        result = spfparse.utils.normalize_domain("..example.com", capacity=4)
        self.assertEqual(result, ("exam", 11))

    def testBoundedCopy(self):
        self.assertEqual(spfparse.utils.bounded_copy("abcdef", 3), ("abc", 6))
        self.assertEqual(spfparse.utils.bounded_copy("abc", 10), ("abc", 3))


class TestSPFParser(unittest.TestCase):
    def testAllQualifiers(self):
        """The qualifier defaults to pass"""
        expected = {
            "v=spf1 all": Qualifier.PASS,
            "v=spf1 +all": Qualifier.PASS,
            "v=spf1 -all": Qualifier.FAIL,
            "v=spf1 ~all": Qualifier.SOFTFAIL,
            "v=spf1 ?all": Qualifier.NEUTRAL,
        }
        for record, qualifier in expected.items():
            parsed = spfparse.record.parse_spf_record(record, DOMAIN)
            self.assertEqual(parsed.terms, [spfparse.terms.All(qualifier=qualifier)])
        self.assertEqual(Qualifier.SOFTFAIL.result, "softfail")

    def testQualifierResults(self):
        self.assertEqual(
            {qualifier.value: qualifier.result for qualifier in Qualifier},
            {"+": "pass", "-": "fail", "~": "softfail", "?": "neutral"},
        )
        self.assertEqual(spfparse.terms.spf_qualifiers.keys(), {"+", "-", "~", "?"})

    def testUnknownModifier(self):
        """Unknown modifiers are kept rather than rejected"""
        parsed = spfparse.record.parse_spf_record("v=spf1 foo=bar", DOMAIN)
        self.assertEqual(parsed.terms, [spfparse.terms.Unknown(name="foo", value="bar")])

        parsed = spfparse.record.parse_spf_record(
            "v=spf1 MS=ms12345 empty= -all", DOMAIN
        )
        self.assertEqual(
            parsed.terms,
            [
                spfparse.terms.Unknown(name="MS", value="ms12345"),
                spfparse.terms.Unknown(name="empty", value=""),
                spfparse.terms.All(qualifier=Qualifier.FAIL),
            ],
        )

    def testDualCIDRDefaults(self):
        parsed = spfparse.record.parse_spf_record("v=spf1 a", DOMAIN)
        self.assertEqual(parsed.terms, [spfparse.terms.A()])
        self.assertEqual(parsed.terms[0].domain_spec, "%{d}")
        self.assertEqual(parsed.terms[0].ip4_prefix, 32)
        self.assertEqual(parsed.terms[0].ip6_prefix, 128)

        term = spfparse.record.parse_spf_record("v=spf1 a/24", DOMAIN).terms[0]
        self.assertEqual((term.ip4_prefix, term.ip6_prefix), (24, 128))

        term = spfparse.record.parse_spf_record("v=spf1 mx//64", DOMAIN).terms[0]
        self.assertEqual((term.ip4_prefix, term.ip6_prefix), (32, 64))

        term = spfparse.record.parse_spf_record(
            "v=spf1 -mx:mail.example.com/0//0", DOMAIN
        ).terms[0]
        self.assertEqual(
            term,
            spfparse.terms.MX(
                qualifier=Qualifier.FAIL,
                domain_spec="mail.example.com",
                ip4_prefix=0,
                ip6_prefix=0,
            ),
        )

    def testSlashDelimiterInHostMacro(self):
        """A / inside a macro is a delimiter, not the start of a dual-cidr"""
        term = spfparse.record.parse_spf_record(
            "v=spf1 a:%{d/}.example.com/24", DOMAIN
        ).terms[0]
        self.assertEqual(
            term,
            spfparse.terms.A(domain_spec="%{d/}.example.com", ip4_prefix=24),
        )

        term = spfparse.record.parse_spf_record(
            "v=spf1 mx:%{l/}.%%.example.com//64", DOMAIN
        ).terms[0]
        self.assertEqual(
            term,
            spfparse.terms.MX(domain_spec="%{l/}.%%.example.com", ip6_prefix=64),
        )

    def testTermOrder(self):
        """Terms are kept in the order they appear in the record"""
        record = (
            "v=spf1 ip4:192.0.2.0/24 ip6:2001:db8::/32 include:_spf.example.com "
            "mx a:%{d} ptr exists:%{i}.spf.example.com "
            "redirect=_spf.example.net exp=explain.%{d} -all"
        )
        parsed = spfparse.record.parse_spf_record(record, DOMAIN)
        self.assertEqual(
            [type(term) for term in parsed.terms],
            [
                spfparse.terms.IP4,
                spfparse.terms.IP6,
                spfparse.terms.Include,
                spfparse.terms.MX,
                spfparse.terms.A,
                spfparse.terms.Ptr,
                spfparse.terms.Exists,
                spfparse.terms.Redirect,
                spfparse.terms.Exp,
                spfparse.terms.All,
            ],
        )
        self.assertEqual(parsed.terms[0].address, "192.0.2.0")
        self.assertEqual(parsed.terms[0].prefix, 24)
        self.assertEqual(parsed.terms[1].address, "2001:db8::")
        self.assertEqual(parsed.terms[1].prefix, 32)
        self.assertEqual(parsed.redirect.domain_spec, "_spf.example.net")
        self.assertEqual(parsed.exp.domain_spec, "explain.%{d}")
        self.assertEqual(len(parsed.mechanisms), 8)
        self.assertIsNone(parsed.error)

    def testUppercaseSPFMechanism(self):
        """Treat uppercase SPF mechanisms as valid, but keep the case of values"""
        parsed = spfparse.record.parse_spf_record(
            "V=SPF1 IP4:147.75.8.208 INCLUDE:_SPF.Example.COM -ALL", "example.no"
        )
        self.assertEqual(
            parsed.terms,
            [
                spfparse.terms.IP4(address="147.75.8.208"),
                spfparse.terms.Include(domain_spec="_SPF.Example.COM"),
                spfparse.terms.All(qualifier=Qualifier.FAIL),
            ],
        )

    def testWhitespace(self):
        """Terms may be separated by several blanks and followed by blanks"""
        parsed = spfparse.record.parse_spf_record("v=spf1  mx\t -all   ", DOMAIN)
        self.assertEqual(len(parsed.terms), 2)
        parsed = spfparse.record.parse_spf_record("v=spf1", DOMAIN)
        self.assertEqual(parsed.terms, [])

    def testDomainSpecNormalized(self):
        parsed = spfparse.record.parse_spf_record(
            "v=spf1 include:..foo..example.com redirect=.example.net.", DOMAIN
        )
        self.assertEqual(parsed.terms[0].domain_spec, "foo.example.com")
        self.assertEqual(parsed.terms[1].domain_spec, "example.net.")

    def testSPFMacrosExists(self):
        """SPF macros can be used with the exists mechanism"""
        record = "v=spf1 exists:%{i}.spf.hc0000-xx.iphmx.com ~all"
        parsed = spfparse.record.parse_spf_record(record, DOMAIN)
        self.assertEqual(parsed.terms[0].domain_spec, "%{i}.spf.hc0000-xx.iphmx.com")

    def testSPFMacrosInclude(self):
        """SPF macros can be used with the include mechanism"""
        record = "v=spf1 include:%{ir}.%{v}.%{d}.spf.has.pphosted.com ~all"
        parsed = spfparse.record.parse_spf_record(record, DOMAIN)
        self.assertEqual(
            parsed.terms[0].domain_spec, "%{ir}.%{v}.%{d}.spf.has.pphosted.com"
        )

    def testRecordDomain(self):
        parsed = spfparse.record.parse_spf_record("v=spf1 -all", "..Example..com")
        self.assertEqual(parsed.domain, "Example.com")
        self.assertEqual(parsed.record_type, dns.rdatatype.RdataType.TXT)

        record = spfparse.record.SPFRecord(DOMAIN, "SPF")
        self.assertEqual(record.record_type, dns.rdatatype.RdataType.SPF)
        self.assertRaises(ValueError, spfparse.record.SPFRecord, DOMAIN, "MX")
        self.assertRaises(ValueError, spfparse.record.SPFRecord, DOMAIN, "FOO")

    def testBytesInput(self):
        parsed = spfparse.record.parse_spf_record(b"v=spf1 ip6:2001:db8::1 -all", DOMAIN)
        self.assertEqual(parsed.terms[0], spfparse.terms.IP6(address="2001:db8::1"))

    def testTXTRdata(self):
        """The character-strings of a TXT record are joined without spaces"""
        rdata = dns.rdata.from_text(
            dns.rdataclass.IN,
            dns.rdatatype.TXT,
            '"v=spf1 ip4:192.0.2.1 " "include:_spf.example.com -all"',
        )
        parsed = spfparse.record.parse_txt_rdata(rdata, DOMAIN)
        self.assertEqual(len(parsed.terms), 3)
        self.assertEqual(parsed.terms[2].qualifier, Qualifier.FAIL)

    def testToDict(self):
        parsed = spfparse.record.parse_spf_record("v=spf1 a/24 foo=bar -all", DOMAIN)
        self.assertEqual(
            parsed.to_dict(),
            {
                "domain": DOMAIN,
                "record_type": "TXT",
                "terms": [
                    {
                        "action": "pass",
                        "mechanism": "a",
                        "domain_spec": "%{d}",
                        "ip4_prefix": 24,
                        "ip6_prefix": 128,
                    },
                    {"modifier": "unknown", "name": "foo", "value": "bar"},
                    {"action": "fail", "mechanism": "all"},
                ],
                "error": None,
            },
        )

    def testTermsAreImmutable(self):
        term = spfparse.record.parse_spf_record("v=spf1 a", DOMAIN).terms[0]
        with self.assertRaises(dataclasses.FrozenInstanceError):
            term.ip4_prefix = 0


class TestSPFSyntaxErrors(unittest.TestCase):
    def testSPFSyntaxErrors(self):
        """SPF record syntax errors raise SPFSyntaxError"""
        record = "v=spf1 mx a:mail.cohaesio.net include: trustpilotservice.com ~all"
        error = _syntax_error(record)
        offset = record.index("include:") + len("include:")
        self.assertEqual(error.context.offset, offset)
        self.assertEqual(error.context.byte, b" ")
        # Terms before the error are kept
        self.assertEqual(
            [type(term) for term in error.record.terms],
            [spfparse.terms.MX, spfparse.terms.A],
        )
        self.assertIs(error.record.error, error.context)

    def testContextWindow(self):
        """The error context is the input up to and including the failing byte"""
        records = [
            "v=spf10",
            "x=spf1 -all",
            "v=spf1 ip4:192.0.2.1~all",
            "v=spf1 include:_spf.google.com include:spf.protection.outlook.com foo",
            "v=spf1 a/33",
            "v=spf1 a:example.com/24/64",
            "v=spf1 ip4:1.2.3 -all",
            "v=spf1 include:%{x}.example.com",
            "v=spf1 ptr:example",
        ]
        for record in records:
            raw = record.encode()
            context = _syntax_error(record).context
            self.assertIn(context.context, raw)
            self.assertTrue(raw[: context.offset + 1].endswith(context.context))
            self.assertLessEqual(len(context.context), ERROR_CONTEXT_LEN + 1)
            self.assertEqual(raw[context.offset : context.offset + 1] or None, context.byte)

    def testVersionTag(self):
        context = _syntax_error("v=spf10 -all").context
        self.assertEqual((context.offset, context.byte), (6, b"0"))
        context = _syntax_error("v=spf2.0/pra -all").context
        self.assertEqual((context.offset, context.byte), (5, b"2"))
        self.assertEqual(_syntax_error("").context.byte, None)

    def testConcatenatedAll(self):
        """An all mechanism must be separated from the previous term"""
        record = "v=spf1 ip4:203.0.113.7~all"
        context = _syntax_error(record).context
        self.assertEqual(context.offset, record.index("~"))

    def testUnknownMechanism(self):
        error = _syntax_error("v=spf1 -all foo")
        self.assertIsNone(error.context.byte)
        self.assertEqual(len(error.record.terms), 1)

    def testQualifiedModifier(self):
        record = "v=spf1 -redirect=example.com"
        self.assertEqual(_syntax_error(record).context.byte, b"=")

    def testDuplicateRedirect(self):
        record = "v=spf1 redirect=a.example.com redirect=b.example.com"
        error = _syntax_error(record)
        self.assertEqual(error.context.offset, record.rindex("redirect"))
        self.assertEqual(len(error.record.terms), 1)

    def testSPFInvalidIPv4(self):
        """Invalid ipv4 SPF mechanism values raise SPFSyntaxError"""
        record = "v=spf1 ip4:78.46.96.236 +a +mx +ip4:relay.mailchannels.net ~all"
        error = _syntax_error(record)
        self.assertEqual(error.context.offset, record.index("relay"))

    def testSPFInvalidIPv6inIPv4(self):
        record = "v=spf1 ip4:2001:db8::1 -all"
        error = _syntax_error(record)
        self.assertEqual(error.context.offset, record.index("2001"))

    def testSPFInvalidIPv4inIPv6(self):
        record = "v=spf1 ip6:192.0.2.1 -all"
        self.assertEqual(_syntax_error(record).context.offset, record.index("192"))

    def testSPFInvalidIPv4Range(self):
        record = "v=spf1 ip4:78.46.96.236/99 -all"
        error = _syntax_error(record)
        self.assertEqual(error.context.offset, record.index("/99") + 2)

    def testSPFInvalidIPv6Range(self):
        record = "v=spf1 ip6:2001:db8::/129 -all"
        error = _syntax_error(record)
        self.assertEqual(error.context.byte, b"9")

    def testCIDRLeadingZero(self):
        record = "v=spf1 a/024"
        self.assertEqual(_syntax_error(record).context.offset, record.index("24"))

    def testMissingCIDRLength(self):
        self.assertIsNone(_syntax_error("v=spf1 mx/").context.byte)

    def testMissingDomainSpec(self):
        self.assertIsNone(_syntax_error("v=spf1 include:").context.byte)
        self.assertEqual(_syntax_error("v=spf1 exists -all").context.byte, b" ")
        self.assertEqual(_syntax_error("v=spf1 redirect=").context.byte, None)

    def testDomainEnd(self):
        """A domain-spec must end with a top-level label or a macro"""
        for record in [
            "v=spf1 include:localhost",
            "v=spf1 include:example.123",
            "v=spf1 a:example.com-/24",
        ]:
            _syntax_error(record)
        for record in [
            "v=spf1 include:example.com.",
            "v=spf1 include:example.x-1",
            "v=spf1 exists:%{l}._spf.%{d}",
            "v=spf1 ptr:a.%%",
        ]:
            spfparse.record.parse_spf_record(record, DOMAIN)

    def testInvalidMacro(self):
        record = "v=spf1 include:%{x}.example.com"
        self.assertEqual(_syntax_error(record).context.offset, record.index("%"))
        record = "v=spf1 exists:%{d}.%.example.com"
        self.assertEqual(_syntax_error(record).context.offset, record.rindex("%"))

    def testNonASCII(self):
        error = _syntax_error(b"v=spf1 include:ex\xffample.com")
        self.assertEqual(error.context.byte, b"\xff")

    def testNameTooLong(self):
        self.assertRaises(
            spfparse.utils.SPFNameTooLong, spfparse.record.SPFRecord, "a" * 300
        )
        record = "v=spf1 include:" + "a" * 250 + ".example.com"
        self.assertRaises(
            spfparse.utils.SPFNameTooLong,
            spfparse.record.parse_spf_record,
            record,
            DOMAIN,
        )


class TestSerializer(unittest.TestCase):
    def testRenderTerm(self):
        terms = spfparse.terms
        expected = {
            terms.All(qualifier=Qualifier.FAIL): "-all",
            terms.A(): "+a:%{d}",
            terms.MX(ip6_prefix=64): "+mx:%{d}//64",
            terms.A(domain_spec="example.com", ip4_prefix=24): "+a:example.com/24",
            terms.Include(domain_spec="_spf.example.com"): "+include:_spf.example.com",
            terms.Ptr(qualifier=Qualifier.NEUTRAL): "?ptr:%{d}",
            terms.Exists(domain_spec="%{i}.bl.example"): "+exists:%{i}.bl.example",
            terms.IP4(address="192.0.2.0", prefix=24): "+ip4:192.0.2.0/24",
            terms.IP6(address="2001:db8::1", prefix=64): (
                "+ip6:2001:0db8:0000:0000:0000:0000:0000:0001/64"
            ),
            terms.Redirect(domain_spec="example.net"): "redirect=example.net",
            terms.Exp(domain_spec="exp.%{d}"): "exp=exp.%{d}",
            terms.Unknown(name="foo", value="bar"): "foo=bar",
        }
        for term, text in expected.items():
            self.assertEqual(spfparse.serializer.render_term(term), text)

    def testRenderNotATerm(self):
        self.assertRaises(TypeError, spfparse.serializer.render_term, "all")

    def testRoundTrip(self):
        """Parsing a canonical rendering renders the same text again"""
        records = [
            "v=spf1 a mx/24//64 ptr -all",
            "v=spf1 ip4:192.0.2.0/24 ip6:2001:db8::/32 ip6:::ffff:192.0.2.1 ~all",
            "v=spf1 include:_spf.example.com exists:%{ir}.%{l1r-}.%{d2}._spf.%{d}",
            "v=spf1 a:%{d}/0//0 redirect=_spf.example.net exp=explain.%{d} foo=bar",
        ]
        for record in records:
            rendered = str(spfparse.record.parse_spf_record(record, DOMAIN))
            reparsed = spfparse.record.parse_spf_record(rendered, DOMAIN)
            self.assertEqual(str(reparsed), rendered)
            for term in reparsed.terms:
                text = spfparse.serializer.render_term(term)
                single = spfparse.record.parse_spf_record(f"v=spf1 {text}", DOMAIN)
                self.assertEqual(single.terms, [term])

    def testRoundTripSlashDelimiter(self):
        term = spfparse.terms.A(domain_spec="%{l/}.example.com")
        text = spfparse.serializer.render_term(term)
        self.assertEqual(text, "+a:%{l/}.example.com")
        parsed = spfparse.record.parse_spf_record(f"v=spf1 {text}", DOMAIN)
        self.assertEqual(parsed.terms, [term])

    def testRenderRecord(self):
        parsed = spfparse.record.parse_spf_record("v=spf1 mx -all", DOMAIN)
        self.assertEqual(
            spfparse.serializer.render_record(parsed), "v=spf1 +mx:%{d} -all"
        )


class TestEnvironment(unittest.TestCase):
    def testGetSet(self):
        environment = spfparse.environment.Environment(defaults=False)
        self.assertEqual(environment.get("d"), ("", MACRO_EXPANSION_MAX_LEN))
        self.assertEqual(environment.set("D", DOMAIN), len(DOMAIN))
        self.assertEqual(environment.get("d")[0], DOMAIN)
        self.assertIsNone(environment.get("x"))

    def testSetTruncates(self):
        environment = spfparse.environment.Environment(defaults=False)
        self.assertEqual(environment.set("d", "a" * 600), 600)
        self.assertEqual(len(environment.get("d")[0]), MACRO_EXPANSION_MAX_LEN)

    def testSetUnknownLetter(self):
        """Unknown letters are ignored and report the source length"""
        environment = spfparse.environment.Environment(defaults=False)
        self.assertEqual(environment.set("x", "abc"), 3)
        self.assertEqual(set(environment.to_dict().values()), {""})

    def testDefaults(self):
        with mock.patch("socket.gethostname", return_value="mx.example.org"):
            environment = spfparse.environment.Environment()
        self.assertEqual(environment.get("r")[0], "mx.example.org")
        self.assertTrue(environment.get("t")[0].isdigit())

    def testDefaultsWithoutHostname(self):
        with mock.patch("socket.gethostname", side_effect=OSError("no hostname")):
            environment = spfparse.environment.Environment()
        self.assertEqual(environment.get("r")[0], "")

    def testSetSender(self):
        environment = spfparse.environment.Environment(defaults=False)
        environment.set_sender("strong-bad@email.example.com")
        self.assertEqual(environment.get("s")[0], "strong-bad@email.example.com")
        self.assertEqual(environment.get("l")[0], "strong-bad")
        self.assertEqual(environment.get("o")[0], "email.example.com")
        environment.set_sender("example.org")
        self.assertEqual(environment.get("s")[0], "postmaster@example.org")
        self.assertEqual(environment.get("l")[0], "postmaster")

    def testSetClientAddress(self):
        environment = spfparse.environment.Environment(defaults=False)
        environment.set_client_address("192.0.2.3")
        self.assertEqual(environment.get("i")[0], "192.0.2.3")
        self.assertEqual(environment.get("v")[0], "in-addr")
        environment.set_client_address("2001:db8::cb01")
        self.assertEqual(
            environment.get("i")[0], ".".join("20010db8" + "0" * 20 + "cb01")
        )
        self.assertEqual(environment.get("v")[0], "ip6")
        self.assertEqual(environment.get("c")[0], "2001:db8::cb01")
        self.assertRaises(ValueError, environment.set_client_address, "example.com")


class TestMacroExpansion(unittest.TestCase):
    def setUp(self):
        self.environment = spfparse.environment.Environment(defaults=False)
        self.environment.set_sender("strong-bad@email.example.com")
        self.environment.set("d", "email.example.com")
        self.environment.set_client_address("192.0.2.3")

    def expand(self, template):
        return spfparse.macro.expand_macro(template, self.environment)

    def testTransformers(self):
        environment = spfparse.environment.Environment(defaults=False)
        environment.set("d", DOMAIN)
        expected = {
            "%{d}": "example.com",
            "%{D}": "example.com",
            "%{d2}": "com",
            "%{dr}": "com.example",
            "%{d2r}": "com.example",
            "%{d1r}": "example",
        }
        for template, expansion in expected.items():
            self.assertEqual(spfparse.macro.expand_macro(template, environment), expansion)

    def testMacroExamples(self):
        """Examples from RFC 7208 § 7.4"""
        expected = {
            "%{s}": "strong-bad@email.example.com",
            "%{o}": "email.example.com",
            "%{d}": "email.example.com",
            "%{d4}": "email.example.com",
            "%{d3}": "email.example.com",
            "%{d2}": "example.com",
            "%{d1}": "com",
            "%{dr}": "com.example.email",
            "%{d2r}": "example.email",
            "%{l}": "strong-bad",
            "%{l-}": "strong.bad",
            "%{lr}": "strong-bad",
            "%{lr-}": "bad.strong",
            "%{l1r-}": "strong",
            "%{ir}.%{v}._spf.%{d2}": "3.2.0.192.in-addr._spf.example.com",
            "%{lr-}.lp._spf.%{d2}": "bad.strong.lp._spf.example.com",
            "%{d2}.trusted-domains.example.net": "example.com.trusted-domains.example.net",
        }
        for template, expansion in expected.items():
            self.assertEqual(self.expand(template), expansion)

    def testIPv6Macro(self):
        self.environment.set_client_address("2001:db8::cb01")
        expansion = self.expand("%{ir}.%{v}._spf.%{d2}")
        nibbles = ".".join(reversed("20010db8" + "0" * 20 + "cb01"))
        self.assertEqual(expansion, f"{nibbles}.ip6._spf.example.com")

    def testEscapes(self):
        """A % followed by anything but { copies the following character"""
        self.assertEqual(self.expand("%%"), "%")
        self.assertEqual(self.expand("a%_b"), "a_b")
        self.assertEqual(self.expand("a%-b"), "a-b")
        self.assertEqual(self.expand("%x"), "x")
        self.assertEqual(self.expand("trailing%"), "trailing%")

    def testUnterminatedMacro(self):
        self.assertEqual(self.expand("%{d"), "%{d")
        self.assertEqual(self.expand("foo.%{"), "foo.%{")
        # The macro ends at the first closing brace
        self.assertEqual(self.expand("%{d.%{d}"), "email.example.com")

    def testUnknownAndEmptyMacros(self):
        self.assertEqual(self.expand("a%{x}b%{}c"), "abc")
        self.assertEqual(self.expand("%{p}"), "")
        self.assertEqual(self.expand("%{p2r}"), "")

    def testKeepZero(self):
        self.assertEqual(self.expand("%{d0}"), "")

    def testValueTooLong(self):
        """A value as long as the working capacity cannot be expanded"""
        self.environment.set("d", "a" * MACRO_EXPANSION_MAX_LEN)
        self.assertRaises(
            spfparse.utils.SPFMacroLengthExceeded, self.expand, "%{d}"
        )

    def testExpansionTooLong(self):
        self.environment.set("d", "a" * 300)
        self.assertEqual(len(self.expand("%{d}")), 300)
        self.assertRaises(
            spfparse.utils.SPFMacroLengthExceeded, self.expand, "%{d}.%{d}"
        )

    def testTooManyParts(self):
        self.environment.set("d", "a." * 200)
        self.assertEqual(self.expand("%{d}"), "a." * 200)
        self.assertRaises(
            spfparse.utils.SPFMacroLengthExceeded, self.expand, "%{d1}"
        )

    def testExpandParsedDomainSpec(self):
        parsed = spfparse.record.parse_spf_record(
            "v=spf1 exists:%{ir}.%{l1r-}.%{d2}._spf.example.net -all", DOMAIN
        )
        self.assertEqual(
            self.expand(parsed.terms[0].domain_spec),
            "3.2.0.192.strong.example.com._spf.example.net",
        )


class TestCLI(unittest.TestCase):
    def testJSONOutput(self):
        argv = [
            "spfparse",
            "v=spf1 a/24 -all",
            "-d",
            DOMAIN,
            "--ip",
            "192.0.2.3",
            "-e",
            "%{ir}.%{d}",
        ]
        output = io.StringIO()
        with mock.patch("sys.argv", argv), redirect_stdout(output):
            spfparse._cli._main()
        results = json.loads(output.getvalue())
        self.assertEqual(results["terms"][0]["ip4_prefix"], 24)
        self.assertEqual(results["expansions"], {"%{ir}.%{d}": "3.2.0.192.example.com"})

    def testSyntaxErrorExits(self):
        with mock.patch("sys.argv", ["spfparse", "v=spf1 foo"]):
            with self.assertRaises(SystemExit) as exit_context:
                spfparse._cli._main()
        self.assertEqual(exit_context.exception.code, 1)


if __name__ == "__main__":
    unittest.main(verbosity=2)
