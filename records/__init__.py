"""Records application for the Medford hospital backend.

Holds the OPD/IPD registration models, the billing and appointment
lists, and the pipeline that renders clinical drawing pages and
discharge summaries into PDF documents and bulk backup archives.
"""
