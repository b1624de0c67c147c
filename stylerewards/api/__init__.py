"""
HTTP blueprints for StyleRewards.
"""
