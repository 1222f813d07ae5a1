import uuid
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('students', '0001_initial'),
        ('menus', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='CouponType',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('kind', models.CharField(choices=[('points', 'Points off'), ('percent', 'Percent off'), ('item', 'Free item')], default='points', max_length=20)),
                ('value', models.PositiveIntegerField(default=0)),
                ('scope', models.CharField(choices=[('order', 'Whole order'), ('item', 'Single item')], default='order', max_length=10)),
                ('enabled', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('item', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='coupon_types', to='menus.menuitem')),
            ],
            options={
                'db_table': 'camp_coupon_types',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='StudentCoupon',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('remaining_qty', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('coupon_type', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='instances', to='coupons.coupontype')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='coupons', to='students.student')),
            ],
            options={
                'db_table': 'camp_student_coupons',
                'ordering': ['created_at'],
                'unique_together': {('student', 'coupon_type')},
                'indexes': [models.Index(fields=['student', 'remaining_qty'], name='student_coupons_remaining_idx')],
            },
        ),
        migrations.CreateModel(
            name='StudentAura',
            fields=[
                ('student', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, primary_key=True, related_name='aura', serialize=False, to='students.student')),
                ('aura_name', models.CharField(max_length=100)),
                ('discount_points', models.PositiveIntegerField(default=0)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'camp_student_auras',
            },
        ),
    ]
