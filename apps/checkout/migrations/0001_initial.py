import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('students', '0001_initial'),
        ('menus', '0001_initial'),
        ('coupons', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='CampAccount',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('balance_points', models.IntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('student', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='camp_account', to='students.student')),
            ],
            options={
                'db_table': 'camp_accounts',
                'constraints': [models.CheckConstraint(condition=models.Q(('balance_points__gte', 0)), name='camp_account_balance_non_negative')],
            },
        ),
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('paid', 'Paid'), ('refunded', 'Refunded')], default='draft', max_length=20)),
                ('paid_by', models.CharField(blank=True, max_length=100)),
                ('subtotal_points', models.PositiveIntegerField(default=0)),
                ('manual_discount_points', models.PositiveIntegerField(default=0)),
                ('coupon_discount_points', models.PositiveIntegerField(default=0)),
                ('aura_discount_points', models.PositiveIntegerField(default=0)),
                ('total_discount_points', models.PositiveIntegerField(default=0)),
                ('payable_points', models.PositiveIntegerField(default=0)),
                ('fingerprint', models.CharField(db_index=True, max_length=64)),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('cashier', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='camp_orders', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'camp_orders',
                'ordering': ['-paid_at', '-created_at'],
                'indexes': [
                    models.Index(fields=['fingerprint', 'paid_at'], name='camp_orders_fingerprint_idx'),
                    models.Index(fields=['status', 'paid_at'], name='camp_orders_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='OrderLine',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('item_name', models.CharField(max_length=100)),
                ('unit_price_points', models.PositiveIntegerField()),
                ('quantity', models.PositiveIntegerField()),
                ('second', models.BooleanField(default=False)),
                ('line_total_points', models.PositiveIntegerField()),
                ('position', models.PositiveSmallIntegerField(default=0)),
                ('menu_item', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='order_lines', to='menus.menuitem')),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lines', to='checkout.order')),
            ],
            options={
                'db_table': 'camp_order_lines',
                'ordering': ['order', 'position'],
            },
        ),
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('amount_points', models.PositiveIntegerField()),
                ('balance_before', models.IntegerField()),
                ('balance_after', models.IntegerField()),
                ('position', models.PositiveSmallIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='payments', to='checkout.order')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='camp_payments', to='students.student')),
            ],
            options={
                'db_table': 'camp_payments',
                'ordering': ['order', 'position'],
                'indexes': [models.Index(fields=['student', 'created_at'], name='camp_payments_student_idx')],
                'unique_together': {('order', 'student')},
            },
        ),
        migrations.CreateModel(
            name='CouponRedemption',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('kind', models.CharField(max_length=20)),
                ('quantity', models.PositiveIntegerField()),
                ('discount_points', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='coupon_redemptions', to='checkout.order')),
                ('student_coupon', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='redemptions', to='coupons.studentcoupon')),
            ],
            options={
                'db_table': 'camp_coupon_redemptions',
                'ordering': ['created_at'],
            },
        ),
        migrations.CreateModel(
            name='Refund',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('refunded_points', models.PositiveIntegerField()),
                ('refunded_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('order', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='refund', to='checkout.order')),
                ('refunded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='camp_refunds', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'camp_order_refunds',
                'ordering': ['-refunded_at'],
            },
        ),
        migrations.CreateModel(
            name='RefundEntry',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('amount_points', models.PositiveIntegerField()),
                ('balance_before', models.IntegerField()),
                ('balance_after', models.IntegerField()),
                ('payment', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='refund_entry', to='checkout.payment')),
                ('refund', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='entries', to='checkout.refund')),
            ],
            options={
                'db_table': 'camp_refund_entries',
                'ordering': ['payment__position'],
            },
        ),
    ]
