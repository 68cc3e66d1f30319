"""Output table stores"""
