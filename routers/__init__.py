"""Routers package for Kurasi marketplace API endpoints"""
from . import curators, customer_reviews, orders, products, redeemables, reviews, sellers, users, verification

__all__ = [
	"curators",
	"customer_reviews",
	"orders",
	"products",
	"redeemables",
	"reviews",
	"sellers",
	"users",
	"verification",
]
