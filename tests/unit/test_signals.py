"""Tests for signal extraction (classification and CV variants)."""

from mailmind.categories.defaults import Category
from mailmind.classification.signals import (
    SignalType,
    extract_cv_signals,
    extract_signals,
    file_extension,
    is_cv_filename,
    keyword_pattern,
    total_weight,
)
from mailmind.observability.confidence import ClassificationPolicy


def _for(signals, category):
    return [s for s in signals if s.category is category]


class TestKeywordMatching:
    def test_word_boundaries(self):
        """Short keywords do not fire inside longer words."""
        pattern = keyword_pattern("cv")
        assert pattern.search("please find my cv attached")
        assert pattern.search("cv_final")
        assert not pattern.search("my cvs order")

    def test_symbol_edges_have_no_boundary(self):
        """Keywords starting with a symbol still match after a digit."""
        assert keyword_pattern("% off").search("get 30% off today")

    def test_keyword_counted_once_per_field(self, email_factory):
        """A keyword repeated in one field yields one signal."""
        email = email_factory(subject="Invoice", body="invoice invoice invoice")
        invoice = [s for s in _for(extract_signals(email), Category.INVOICE_PAYMENT) if s.value == "invoice"]
        assert len(invoice) == 2
        assert {s.type for s in invoice} == {SignalType.SUBJECT_KEYWORD, SignalType.BODY_KEYWORD}

    def test_preview_and_body_are_one_field(self, email_factory):
        """A preview that repeats the body does not double count."""
        email = email_factory(preview="Partnership idea", body="Partnership idea, let us talk.")
        partnership = [s for s in extract_signals(email) if s.value == "partnership"]
        assert len(partnership) == 1

    def test_case_insensitive(self, email_factory):
        """Matching ignores case."""
        email = email_factory(subject="URGENT!!! You are a WINNER")
        values = {s.value for s in _for(extract_signals(email), Category.OBVIOUS_SPAM)}
        assert {"urgent!!!", "winner"} <= values

    def test_empty_email_has_no_signals(self, email_factory):
        """No text, no attachment, neutral sender: nothing fires."""
        assert extract_signals(email_factory()) == []


class TestAttachmentSignals:
    def test_cv_attachment_supports_both_cv_categories(self, unsolicited_cv_email):
        """A CV-shaped PDF adds filename 4 + document 1 to both CV categories."""
        signals = extract_signals(unsolicited_cv_email)
        for category in (Category.CV_UNSOLICITED, Category.CV_JOB_OFFER):
            attachment = [s for s in _for(signals, category) if s.type in (SignalType.FILENAME, SignalType.ATTACHMENT_KIND)]
            assert sorted(s.weight for s in attachment) == [1, 4]

    def test_family_fires_once_per_email(self, email_factory):
        """Two CV attachments do not double the filename bonus."""
        email = email_factory(attachments=["cv_fr.pdf", "cv_en.pdf"])
        filename = [s for s in _for(extract_signals(email), Category.CV_UNSOLICITED) if s.type is SignalType.FILENAME]
        assert len(filename) == 1

    def test_non_document_extension_ignored(self, email_factory):
        """A CV-named image is not a document."""
        email = email_factory(attachments=["cv_photo.png"])
        assert _for(extract_signals(email), Category.CV_UNSOLICITED) == []

    def test_has_attachment_false_ignores_list(self, email_factory):
        """has_attachment=False wins over a stale attachment list."""
        email = email_factory(attachments=["invoice.pdf"], has_attachment=False)
        assert not email.effective_attachments
        assert _for(extract_signals(email), Category.INVOICE_PAYMENT) == []

    def test_invoice_and_quote_families(self, email_factory):
        """Invoice and quote names score their own categories."""
        email = email_factory(attachments=["Invoice-0042.pdf", "quote_v2.docx"])
        signals = extract_signals(email)
        assert total_weight(_for(signals, Category.INVOICE_PAYMENT)) == 4
        assert total_weight(_for(signals, Category.QUOTE_PROPOSAL)) == 4


class TestSenderSignals:
    def test_internal_domain(self, email_factory):
        """Internal senders, subdomains included, score internal_team."""
        email = email_factory(sender_email="Paul <paul@eu.mailmind.io>")
        internal = [s for s in _for(extract_signals(email), Category.INTERNAL_TEAM) if s.weight == 3]
        assert len(internal) == 1
        assert internal[0].type is SignalType.SENDER_DOMAIN

    def test_lookalike_domain_is_not_internal(self, email_factory):
        """notmailmind.io is not a subdomain of mailmind.io."""
        email = email_factory(sender_email="paul@notmailmind.io")
        assert _for(extract_signals(email), Category.INTERNAL_TEAM) == []

    def test_platform_domain(self, email_factory):
        """Platform senders support notification and supplier."""
        email = email_factory(sender_email="jobs-noreply@linkedin.com")
        signals = extract_signals(email)
        platform = [s for s in signals if s.value == "linkedin.com"]
        assert {s.category for s in platform} == {Category.PLATFORM_NOTIFICATION, Category.SUPPLIER}
        assert all(s.weight == 2 for s in platform)

    def test_policy_domains_are_overridable(self, email_factory):
        """A policy instance can declare its own internal domains."""
        policy = ClassificationPolicy(internal_domains=("acme.test",))
        email = email_factory(sender_email="boss@acme.test")
        assert total_weight(_for(extract_signals(email, policy), Category.INTERNAL_TEAM)) == 3


class TestCVSignals:
    def test_full_cv_email(self, email_factory):
        """Filename, PDF, one subject keyword and two body keywords."""
        email = email_factory(
            subject="Application for the developer position",
            body="I have attached my CV. My background is in Python and my skills include Django.",
            attachments=["CV_Jane_Doe.pdf"],
        )
        signals = extract_cv_signals(email)
        assert [s.weight for s in signals] == [4, 2, 3, 2, 2]
        assert [s.value for s in signals if s.type is SignalType.BODY_KEYWORD] == ["attached my cv", "my background"]
        assert all(s.category is None for s in signals)

    def test_word_document_bonus(self, email_factory):
        """Word documents add the smaller attachment-kind bonus."""
        signals = extract_cv_signals(email_factory(attachments=["resume.docx"]))
        assert [(s.type, s.weight) for s in signals] == [(SignalType.FILENAME, 4), (SignalType.ATTACHMENT_KIND, 1)]

    def test_plain_pdf(self, invoice_email):
        """A non-CV PDF only contributes the PDF bonus."""
        signals = extract_cv_signals(invoice_email)
        assert [(s.value, s.weight) for s in signals] == [("PDF", 2)]


class TestFileHelpers:
    def test_file_extension(self):
        assert file_extension("Report.Final.PDF") == "pdf"
        assert file_extension("README") == ""

    def test_is_cv_filename(self):
        """CV-shaped names use letter boundaries."""
        assert is_cv_filename("CV_Jane.pdf")
        assert is_cv_filename("jane-resume-2024.docx")
        assert is_cv_filename("Cover_Letter.pdf")
        assert not is_cv_filename("cvs_receipt.pdf")
