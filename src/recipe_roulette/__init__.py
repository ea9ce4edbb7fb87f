"""
Recipe Roulette: recipes, meal plans and generated shopping lists.
"""

__version__ = "0.1.0"
