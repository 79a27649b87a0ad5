"""Customer Experience dashboard reports over the Olist e-commerce dataset."""
