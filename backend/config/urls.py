"""
URL configuration for the potato distribution backend.

Every app contributes its own `urlpatterns`, mounted under `api/`.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Potato Distribution Admin Panel"
admin.site.site_title = "Potato Distribution Admin Portal"
admin.site.index_title = "Suppliers, customers, stock and invoices"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('backend.core.urls')),
    path('api/', include('backend.parties.urls')),
    path('api/', include('backend.catalog.urls')),
    path('api/', include('backend.purchasing.urls')),
    path('api/', include('backend.sales.urls')),
    path('api/', include('backend.ledger.urls')),
    path('api/', include('backend.reports.urls')),
]
