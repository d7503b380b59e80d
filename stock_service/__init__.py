"""Inventory tracking service with barcode and QR code support."""
