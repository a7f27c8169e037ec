from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/accounts/', include('accounts.urls')),
    path('api/contracts/', include('contracts.urls')),
    path('api/amendments/', include('contracts.amendment_urls')),
]
