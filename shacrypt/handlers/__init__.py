"""shacrypt.handlers -- hash handler implementations"""
