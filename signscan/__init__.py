"""Signboard OCR.

Extracts addresses, phone numbers, emails, URLs and free text from
photographs of signboards, menus and receipts in mixed Latin and Tamil
script, using multi-recipe OpenCV preprocessing and Tesseract OCR.
"""
