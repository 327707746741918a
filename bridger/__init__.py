"""
Transferências de USDC: direta na Solana ou via bridge LI.FI entre Solana e Base.
"""
