from django.contrib import admin

from .models import Menu, MenuItem


class MenuItemInline(admin.TabularInline):
    model = MenuItem
    extra = 0
    fields = ['name', 'price_points', 'allow_second', 'second_price_points', 'enabled']


@admin.register(Menu)
class MenuAdmin(admin.ModelAdmin):
    list_display = ['name', 'enabled', 'sort_order']
    list_filter = ['enabled']
    inlines = [MenuItemInline]


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = ['name', 'menu', 'price_points', 'allow_second', 'second_price_points', 'enabled']
    list_filter = ['menu', 'enabled', 'allow_second']
    search_fields = ['name']
