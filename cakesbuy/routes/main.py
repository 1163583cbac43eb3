"""Public storefront routes: catalogue, delivery areas, promo codes and content."""

from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from sqlalchemy import or_
from cakesbuy.extensions import db
from cakesbuy.forms import validation_error
from cakesbuy.forms.account import ReviewForm
from cakesbuy.models import (Category, Cake, Addon, DeliveryArea, PromoCode, NavigationItem,
                             Page, Review, Order, OrderItem)
from cakesbuy.utils.decorators import admin_required, customer_required
from cakesbuy.utils.helpers import parse_bool, json_body
from cakesbuy.utils.uploads import allowed_file, save_file

main_bp = Blueprint('main', __name__)


# --- Categories ---

@main_bp.route('/categories')
def categories():
    """Active categories."""
    categories = Category.query.filter_by(is_active=True).order_by(Category.name).all()
    return jsonify([c.to_dict() for c in categories])


@main_bp.route('/categories/<slug>')
def category_detail(slug):
    category = Category.query.filter_by(slug=slug, is_active=True).first()
    if not category:
        return jsonify({'message': 'Category not found'}), 404
    return jsonify(category.to_dict())


# --- Cakes ---

@main_bp.route('/cakes')
def cakes():
    """Browse cakes with filters, sorting and pagination."""
    page = request.args.get('page', 1, type=int)
    limit = request.args.get('limit', current_app.config['ITEMS_PER_PAGE'], type=int)
    limit = max(1, min(limit, 100))

    query = Cake.query.filter(Cake.is_available == True)  # noqa: E712

    category_id = request.args.get('category_id', type=int)
    if category_id:
        query = query.filter(Cake.category_id == category_id)

    category_slug = request.args.get('category')
    if category_slug:
        query = query.join(Category).filter(Category.slug == category_slug)

    is_eggless = parse_bool(request.args.get('is_eggless'))
    if is_eggless is not None:
        query = query.filter(Cake.is_eggless == is_eggless)

    is_bestseller = parse_bool(request.args.get('is_bestseller'))
    if is_bestseller is not None:
        query = query.filter(Cake.is_bestseller == is_bestseller)

    search = request.args.get('search', '').strip()
    if search:
        term = f'%{search}%'
        query = query.filter(or_(
            Cake.name.ilike(term),
            Cake.description.ilike(term),
            db.cast(Cake.tags, db.String).ilike(term)
        ))

    min_price = request.args.get('min_price', type=float)
    if min_price is not None:
        query = query.filter(Cake.base_price >= min_price)
    max_price = request.args.get('max_price', type=float)
    if max_price is not None:
        query = query.filter(Cake.base_price <= max_price)

    sort = request.args.get('sort', '')
    if sort == 'name':
        query = query.order_by(Cake.name.asc())
    elif sort == 'price_asc':
        query = query.order_by(Cake.base_price.asc())
    elif sort == 'price_desc':
        query = query.order_by(Cake.base_price.desc())
    elif sort == 'rating':
        query = query.order_by(Cake.rating.desc())
    else:
        query = query.order_by(Cake.created_at.desc(), Cake.id.desc())

    pagination = query.paginate(page=page, per_page=limit, error_out=False)

    return jsonify({
        'cakes': [c.to_dict() for c in pagination.items],
        'total': pagination.total,
        'pages': pagination.pages,
        'current_page': page,
        'has_next_page': pagination.has_next,
        'has_prev_page': pagination.has_prev
    })


@main_bp.route('/cakes/<slug>')
def cake_detail(slug):
    cake = Cake.query.filter_by(slug=slug).first()
    if not cake:
        return jsonify({'message': 'Cake not found'}), 404
    return jsonify(cake.to_dict())


@main_bp.route('/cakes/<int:cake_id>/reviews')
def cake_reviews(cake_id):
    cake = Cake.query.get_or_404(cake_id)
    reviews = cake.reviews.order_by(Review.created_at.desc()).all()
    return jsonify([r.to_dict() for r in reviews])


@main_bp.route('/cakes/<int:cake_id>/reviews', methods=['POST'])
@login_required
@customer_required
def add_review(cake_id):
    """Review a cake. Marked verified when the reviewer received it."""
    cake = Cake.query.get_or_404(cake_id)
    form = ReviewForm()
    if not form.validate_on_submit():
        return validation_error(form)

    purchased = Order.query.join(OrderItem).filter(
        Order.user_id == current_user.id,
        Order.status == 'delivered',
        OrderItem.cake_id == cake.id
    ).first()

    review = Review(
        user_id=current_user.id,
        cake=cake,
        order_id=form.order_id.data or (purchased.id if purchased else None),
        rating=form.rating.data,
        comment=form.comment.data,
        is_verified=purchased is not None
    )
    db.session.add(review)
    db.session.flush()
    cake.update_rating()
    db.session.commit()

    return jsonify(review.to_dict()), 201


# --- Addons ---

@main_bp.route('/addons')
def addons():
    query = Addon.query.filter_by(is_available=True)
    category = request.args.get('category')
    if category:
        query = query.filter_by(category=category)
    return jsonify([a.to_dict() for a in query.order_by(Addon.name).all()])


# --- Delivery areas ---

@main_bp.route('/delivery-areas')
def delivery_areas():
    areas = DeliveryArea.query.filter_by(is_active=True).order_by(DeliveryArea.name).all()
    return jsonify([a.to_dict() for a in areas])


@main_bp.route('/delivery-areas/check/<pincode>')
def check_delivery(pincode):
    """Check whether a pincode is serviceable."""
    area = DeliveryArea.query.filter_by(pincode=pincode, is_active=True).first()
    if not area:
        return jsonify({
            'available': False,
            'message': 'Sorry, we do not deliver to this pincode yet'
        }), 404
    return jsonify({
        'available': True,
        'area': area.to_dict(),
        'message': f'Delivery available in {area.name}'
    })


# --- Promo codes ---

@main_bp.route('/promo-codes/validate', methods=['POST'])
def validate_promo_code():
    """Validate a promo code against an order value."""
    data = json_body()
    code = data.get('code')
    order_value = data.get('order_value')

    if not code or order_value is None:
        return jsonify({'message': 'Code and order value are required'}), 400
    try:
        order_value = float(order_value)
    except (TypeError, ValueError):
        return jsonify({'message': 'Order value must be a number'}), 400

    is_valid, discount, message = PromoCode.validate(code, order_value)
    if is_valid:
        return jsonify({
            'valid': True,
            'discount': discount,
            'message': f'Promo code applied! You save ₹{discount:.2f}'
        })
    return jsonify({'valid': False, 'message': message})


# --- Content ---

@main_bp.route('/navigation-items')
def navigation_items():
    items = NavigationItem.query.filter_by(is_active=True).order_by(NavigationItem.position).all()
    return jsonify([item.to_dict() for item in items])


@main_bp.route('/pages')
def pages():
    pages = Page.query.filter_by(is_published=True).order_by(Page.menu_order, Page.title).all()
    return jsonify([p.to_dict() for p in pages])


@main_bp.route('/pages/<slug>')
def page_detail(slug):
    page = Page.query.filter_by(slug=slug, is_published=True).first()
    if not page:
        return jsonify({'message': 'Page not found'}), 404
    return jsonify(page.to_dict())


@main_bp.route('/search')
def search():
    """Search cakes and categories."""
    query = request.args.get('q', '').strip()

    if len(query) < 2:
        return jsonify({'cakes': [], 'categories': []})

    cakes = Cake.query.filter(
        Cake.is_available == True,  # noqa: E712
        Cake.name.ilike(f'%{query}%')
    ).limit(10).all()

    categories = Category.query.filter(
        Category.is_active == True,  # noqa: E712
        Category.name.ilike(f'%{query}%')
    ).limit(5).all()

    return jsonify({
        'cakes': [{
            'id': c.id,
            'name': c.name,
            'slug': c.slug,
            'price': c.base_price,
            'image': (c.images or [None])[0]
        } for c in cakes],
        'categories': [{
            'id': c.id,
            'name': c.name,
            'slug': c.slug
        } for c in categories]
    })


# --- Uploads ---

@main_bp.route('/upload', methods=['POST'])
@login_required
@admin_required
def upload_image():
    """Upload a single image."""
    file = request.files.get('image')
    if not file or not file.filename:
        return jsonify({'message': 'No image file provided'}), 400
    if not allowed_file(file.filename):
        return jsonify({'message': 'Only image files are allowed'}), 400

    url = save_file(file, 'images')
    return jsonify({'url': url, 'message': 'Image uploaded successfully'}), 201


@main_bp.route('/upload/multiple', methods=['POST'])
@login_required
@admin_required
def upload_images():
    """Upload up to 10 images."""
    files = [f for f in request.files.getlist('images') if f and f.filename]
    if not files:
        return jsonify({'message': 'No image files provided'}), 400
    if len(files) > 10:
        return jsonify({'message': 'You can upload at most 10 images at a time'}), 400
    if not all(allowed_file(f.filename) for f in files):
        return jsonify({'message': 'Only image files are allowed'}), 400

    urls = [save_file(f, 'images') for f in files]
    return jsonify({'urls': urls, 'message': f'{len(urls)} images uploaded successfully'}), 201
