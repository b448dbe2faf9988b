"""Reservations domain: appointments and calendar/sheet synchronization"""
