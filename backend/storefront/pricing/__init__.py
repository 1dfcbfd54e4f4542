"""
Module Pricing.

Ce module calcule le détail de prix d'une commande :
- sous-total exact des lignes
- remise et frais de livraison selon la région (code postal)
- frais de manutention et taxe selon la configuration versionnée
"""
