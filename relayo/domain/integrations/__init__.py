"""Integrations domain: Google (Calendar + Sheets) and Twilio connections"""
