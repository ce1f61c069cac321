"""Parsers turning uploaded files into map geometry."""
