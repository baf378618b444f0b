"""Product management: commands and handler."""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from distribution.access.actor import Actor
from distribution.domain import distribution
from distribution.stock.product import DEFAULT_LOW_STOCK_THRESHOLD, Product


@distribution.command(part_of="Product")
class CreateProduct:
    name = String(required=True, max_length=255)
    brand_name = String(max_length=255)
    dimension = String(max_length=255)
    stock_quantity = Integer(default=0)
    low_stock_threshold = Integer(default=DEFAULT_LOW_STOCK_THRESHOLD)
    actor_id = Identifier(required=True)
    actor_name = String(max_length=255)
    actor_role = String(max_length=50)


@distribution.command(part_of="Product")
class UpdateProduct:
    """Edit product details. Omitted fields are left unchanged."""

    product_id = Identifier(required=True)
    name = String(max_length=255)
    brand_name = String(max_length=255)
    dimension = String(max_length=255)
    stock_quantity = Integer()
    low_stock_threshold = Integer()
    actor_id = Identifier(required=True)
    actor_name = String(max_length=255)
    actor_role = String(max_length=50)


@distribution.command(part_of="Product")
class DeleteProduct:
    product_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_name = String(max_length=255)
    actor_role = String(max_length=50)


@distribution.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        product = Product.create(
            name=command.name,
            actor=Actor.from_command(command),
            brand_name=command.brand_name,
            dimension=command.dimension,
            stock_quantity=command.stock_quantity,
            low_stock_threshold=command.low_stock_threshold,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.update_details(
            actor=Actor.from_command(command),
            name=command.name,
            brand_name=command.brand_name,
            dimension=command.dimension,
            stock_quantity=command.stock_quantity,
            low_stock_threshold=command.low_stock_threshold,
        )
        repo.add(product)

    @handle(DeleteProduct)
    def delete_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.mark_deleted(Actor.from_command(command))
        repo.add(product)
        repo._dao.delete(product)
