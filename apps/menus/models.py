from django.db import models
import uuid


class Menu(models.Model):
    """A named section of the camp store (snacks, lunch, drinks)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    enabled = models.BooleanField(default=True)
    sort_order = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'camp_menus'
        ordering = ['sort_order', 'name']

    def __str__(self):
        return self.name


class MenuItem(models.Model):
    """Sellable item priced in camp points."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    menu = models.ForeignKey(
        Menu,
        on_delete=models.CASCADE,
        related_name='items'
    )
    name = models.CharField(max_length=100)

    # Pricing
    price_points = models.PositiveIntegerField()
    allow_second = models.BooleanField(default=False)
    second_price_points = models.PositiveIntegerField(null=True, blank=True)

    enabled = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'camp_menu_items'
        indexes = [
            models.Index(fields=['menu', 'enabled'], name='menu_items_menu_enabled_idx'),
        ]
        ordering = ['menu', 'name']

    def __str__(self):
        return f"{self.name} ({self.price_points} pts)"

    @property
    def is_available(self):
        """Item can be sold only when both it and its menu are enabled."""
        return self.enabled and self.menu.enabled

    def unit_price(self, second=False):
        """Price of one unit; second servings use the override when allowed."""
        if second and self.allow_second:
            if self.second_price_points is not None:
                return self.second_price_points
        return self.price_points
