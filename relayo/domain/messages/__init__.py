"""Messages domain: SMS log and conversation summaries"""
