"""Core settlement engine: pricing, escrow, auctions, ledger, registry"""
