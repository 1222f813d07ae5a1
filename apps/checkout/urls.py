from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'checkout'

router = DefaultRouter()
router.register(r'orders', views.OrderViewSet, basename='order')

urlpatterns = [
    # Register
    # POST   /api/camp/quote/                   - Quote preview
    # POST   /api/camp/split/                   - Even split helper
    # POST   /api/camp/checkout/                - Commit order
    path('quote/', views.quote, name='quote'),
    path('split/', views.split, name='split'),
    path('checkout/', views.checkout, name='checkout'),

    # GET    /api/camp/students/{id}/balance/   - Balance, aura, coupons
    path('students/<uuid:student_id>/balance/', views.student_balance, name='student-balance'),

    # Order history
    # GET    /api/camp/orders/                  - List orders
    # GET    /api/camp/orders/{id}/             - Order detail
    # POST   /api/camp/orders/{id}/refund/      - Refund order
    path('', include(router.urls)),
]
