"""Minimal LSP server for exprtemplate — diagnostics only."""

from __future__ import annotations

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticRelatedInformation,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Location,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from exprtemplate import __version__
from exprtemplate.context import DOLLAR_TEMPLATE
from exprtemplate.errors import TemplateParseError
from exprtemplate.parser import TemplateParser
from exprtemplate.pyexpr import python_sub_parser
from exprtemplate.tokens import Span

server = LanguageServer(
    "exprtemplate-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full
)

_parser = TemplateParser(python_sub_parser)


def _to_range(span: Span) -> Range:
    return Range(
        start=Position(line=span.start.line - 1, character=span.start.column - 1),
        end=Position(line=span.end.line - 1, character=span.end.column - 1),
    )


def _validate(ls: LanguageServer, uri: str) -> None:
    """Parse the template document and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    source = doc.source
    diagnostics: list[Diagnostic] = []

    try:
        _parser.parse_template(source, DOLLAR_TEMPLATE)
    except TemplateParseError as exc:
        related = [
            DiagnosticRelatedInformation(
                location=Location(uri=uri, range=_to_range(mark.span)), message=mark.label
            )
            for mark in exc.marks
            if not mark.primary
        ]
        diagnostics.append(
            Diagnostic(
                range=_to_range(exc.span),
                message=exc.message,
                severity=DiagnosticSeverity.Error,
                source="exprtemplate",
                related_information=related or None,
            )
        )

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
