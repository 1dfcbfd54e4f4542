"""
Storefront - tarification, exécution et facturation des commandes.
"""
