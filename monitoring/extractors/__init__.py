"""Raw data sources"""
