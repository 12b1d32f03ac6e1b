"""
helpdesk-rag — question answering over uploaded PDF documents.

Documents are split into overlapping chunks, embedded, and upserted into
an external vector index.  Questions are embedded, matched against that
index, and answered by a chat model that is only allowed to use the
retrieved passages.  Every answer carries the citations it was built from.
"""

__version__ = "0.1.0"
