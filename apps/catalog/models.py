"""
Master data referenced by complaints.

Maintained through the Django admin only; the complaint services treat these
rows as opaque foreign keys and only check that a subcategory or brand
belongs to the chosen category.
"""

from django.db import models


class Category(models.Model):
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['name']
        verbose_name_plural = 'Categories'

    def __str__(self):
        return self.name


class Subcategory(models.Model):
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name='subcategories')
    name = models.CharField(max_length=100)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['category__name', 'name']
        verbose_name_plural = 'Subcategories'
        constraints = [
            models.UniqueConstraint(fields=['category', 'name'], name='unique_subcategory_per_category'),
        ]

    def __str__(self):
        return f"{self.category.name} / {self.name}"


class Brand(models.Model):
    # A brand without a category is offered for every category.
    category = models.ForeignKey(
        Category,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='brands',
    )
    name = models.CharField(max_length=100)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(fields=['category', 'name'], name='unique_brand_per_category'),
        ]

    def __str__(self):
        return self.name

    def is_available_for(self, category):
        return self.category_id is None or self.category_id == category.pk


class State(models.Model):
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name
