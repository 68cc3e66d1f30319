"""Aggregation, comparison and alert classification stages"""
